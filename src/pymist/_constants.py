"""Internal constants shared across the library."""

from __future__ import annotations

from typing import Any

DEFAULT_BASE_URL = "http://localhost:4242"
DEFAULT_API_PATH = "/api"
DEFAULT_QUERY_TIMEOUT = 10.0
DEFAULT_UPDATE_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 10.0

# ------------------------------------------------------------------
# Aggregate sync command
# ------------------------------------------------------------------

CLIENT_FIELDS: tuple[str, ...] = ("host", "stream", "protocol", "conntime", "sessId")


def build_aggregate_command() -> dict[str, Any]:
    """Build the single combined query that fetches every facet at once.

    A fresh dict is returned each time so callers may not mutate shared state.
    """
    return {
        "active_streams": True,
        "streams": True,
        "stats_streams": True,
        "push_list": True,
        "clients": {"fields": list(CLIENT_FIELDS)},
    }


# ------------------------------------------------------------------
# Input validation
# ------------------------------------------------------------------

STREAM_NAME_MAX_LENGTH = 50
STREAM_NAME_INVALID_CHARS = frozenset("!@#$%^&*()+={}[]|\\:;\"'<>?,./")
STREAM_SOURCE_SCHEMES: tuple[str, ...] = ("rtmp://", "rtsp://", "http://", "https://", "file://", "push://")
PUSH_TARGET_SCHEMES: tuple[str, ...] = (
    "rtmp://",
    "rtmps://",
    "rtsp://",
    "srt://",
    "udp://",
    "file://",
    "http://",
    "https://",
)
