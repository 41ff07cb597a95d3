"""Protocol listener models."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pymist.ingestion.normalize import int_or_zero, safe_str
from pymist.models._base import MistBaseModel


class ProtocolState(MistBaseModel):
    """Configured connector (RTMP, HLS, ...) and the port it listens on."""

    connector: str
    port: int = 0
    interface: str | None = None

    @field_validator("port", mode="before")
    @classmethod
    def _coerce_port(cls, value: Any) -> int:
        return int_or_zero(value)

    @field_validator("interface", mode="before")
    @classmethod
    def _coerce_interface(cls, value: Any) -> str | None:
        return safe_str(value)

    @property
    def enabled(self) -> bool:
        return self.port > 0
