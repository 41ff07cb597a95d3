"""Normalizers for server-wide responses (``totals`` and ``config``).

Like the facet normalizers, these never raise: missing sections leave
the model defaults in place.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from pymist.ingestion.normalize import as_mapping, int_or_zero, safe_int, safe_str
from pymist.models.server import REQUIRED_CONFIG_SECTIONS, ConfigSummary, ServerStats

_logger = logging.getLogger(__name__)


def _latest_totals(fragment: Any) -> dict[str, Any]:
    """Return the totals as one flat dict.

    The tabular form (``{"fields": [...], "data": [[...], ...]}``) holds one
    row per sample interval; the last row is the current value.
    """
    totals = as_mapping(fragment)
    fields, rows = totals.get("fields"), totals.get("data")
    if isinstance(fields, list) and isinstance(rows, list):
        latest = next((row for row in reversed(rows) if isinstance(row, list)), None)
        if latest is None:
            return {}
        return dict(zip((str(field) for field in fields), latest, strict=False))
    return totals


def normalize_server_stats(response: Any) -> ServerStats:
    body = as_mapping(response)
    totals = _latest_totals(body.get("totals"))
    memory = as_mapping(body.get("memory"))
    cpu = as_mapping(body.get("cpu"))
    payload = {
        "total_clients": totals.get("clients"),
        "total_bandwidth": totals.get("bps_out", totals.get("upbps")),
        "uptime": totals.get("uptime"),
        "total_streams": totals.get("streams"),
        "memory_used": memory.get("used"),
        "memory_total": memory.get("total"),
        "cpu_usage": cpu.get("usage"),
        "raw": body,
    }
    try:
        return ServerStats.model_validate(payload)
    except ValidationError as exc:
        _logger.debug("Unusable totals response: %s", exc.errors(include_url=False))
        return ServerStats()


def _count(section: Any) -> int:
    if isinstance(section, (Mapping, list)):
        return len(section)
    return 0


def summarize_config(response: Any) -> ConfigSummary:
    """Build a :class:`ConfigSummary` from a ``config`` response.

    Sections are looked up in the ``config`` object first and then at the
    top level of *response*, where the server puts ``streams`` and
    ``autopushes``.  Listener settings fall back to the ``controller``
    block.
    """
    body = as_mapping(response)
    config = as_mapping(body.get("config"))
    controller = as_mapping(config.get("controller"))

    def section(name: str) -> Any:
        value = config.get(name)
        return body.get(name) if value is None else value

    streams = section("streams")
    protocols = section("protocols")
    protocol_entries: list[Mapping[str, Any]] = []
    if isinstance(protocols, list):
        protocol_entries = [entry for entry in protocols if isinstance(entry, Mapping)]

    missing = tuple(name for name in REQUIRED_CONFIG_SECTIONS if section(name) is None)
    if missing:
        _logger.warning("Configuration missing required sections: %s", ", ".join(missing))

    payload: dict[str, Any] = {
        "stream_count": _count(streams),
        "stream_names": tuple(sorted(str(name) for name in streams)) if isinstance(streams, Mapping) else (),
        "protocol_count": _count(protocols),
        "enabled_protocol_count": sum(1 for entry in protocol_entries if int_or_zero(entry.get("port")) > 0),
        "trigger_count": _count(section("triggers")),
        "auto_push_count": _count(section("autopushes")),
        "server_name": safe_str(config.get("name")),
        "server_port": safe_int(config.get("port", controller.get("port"))),
        "server_interface": safe_str(config.get("interface", controller.get("interface"))),
        "version": safe_str(config.get("version")),
        "missing_sections": missing,
        "raw": body,
    }
    return ConfigSummary.model_validate(payload)
