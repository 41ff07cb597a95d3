"""Server-wide statistics and configuration summary models."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pymist.formatting import format_bandwidth, format_bytes, format_duration
from pymist.ingestion.normalize import int_or_zero, safe_float
from pymist.models._base import MistBaseModel

#: Top-level config sections a usable configuration must carry.
REQUIRED_CONFIG_SECTIONS: tuple[str, ...] = ("streams", "protocols")


class ServerStats(MistBaseModel):
    """Server totals plus host memory and CPU load, when reported."""

    total_clients: int = 0
    total_bandwidth: int = 0
    """Outgoing bits per second."""
    uptime: int = 0
    total_streams: int = 0
    memory_used: int = 0
    memory_total: int = 0
    cpu_usage: float = 0.0
    """Percent."""

    @field_validator(
        "total_clients",
        "total_bandwidth",
        "uptime",
        "total_streams",
        "memory_used",
        "memory_total",
        mode="before",
    )
    @classmethod
    def _coerce_int(cls, value: Any) -> int:
        return int_or_zero(value)

    @field_validator("cpu_usage", mode="before")
    @classmethod
    def _coerce_cpu(cls, value: Any) -> float:
        parsed = safe_float(value)
        return 0.0 if parsed is None else parsed

    @property
    def formatted_bandwidth(self) -> str:
        return format_bandwidth(self.total_bandwidth)

    @property
    def formatted_uptime(self) -> str:
        return format_duration(self.uptime)

    @property
    def formatted_memory(self) -> str:
        return format_bytes(self.memory_used)

    @property
    def formatted_cpu(self) -> str:
        return f"{self.cpu_usage:.1f}%"


class ConfigSummary(MistBaseModel):
    """Counts and listener settings extracted from a ``config`` response.

    ``missing_sections`` names the required sections the response lacked;
    the summary is still built from whatever was present.
    """

    stream_count: int = 0
    stream_names: tuple[str, ...] = ()
    protocol_count: int = 0
    enabled_protocol_count: int = 0
    trigger_count: int = 0
    auto_push_count: int = 0
    server_name: str = "MistServer"
    server_port: int = 4242
    server_interface: str = "0.0.0.0"
    version: str | None = None
    missing_sections: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.missing_sections

    def __str__(self) -> str:
        return (
            f"Streams: {self.stream_count}, Auto pushes: {self.auto_push_count}, "
            f"Protocols: {self.enabled_protocol_count}/{self.protocol_count} enabled"
        )
