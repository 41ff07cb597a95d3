"""Active push models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pymist.formatting import format_bandwidth, format_bytes, format_duration
from pymist.ingestion.normalize import int_or_zero, safe_str
from pymist.models._base import MistBaseModel


class PushRecord(MistBaseModel):
    """One outgoing push, keyed by its server-assigned id.

    ``push_id`` and ``stream_name`` are different identifier domains.
    Stopping a push needs the id, never the stream name.
    """

    push_id: str = Field(validation_alias=AliasChoices("push_id", "id"))
    stream_name: str | None = Field(default=None, validation_alias=AliasChoices("stream_name", "stream"))
    target: str | None = None
    bytes: int = 0
    active_seconds: int = 0
    bps: int = 0

    @field_validator("push_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @field_validator("stream_name", "target", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("bytes", "active_seconds", "bps", mode="before")
    @classmethod
    def _coerce_counters(cls, value: Any) -> int:
        return int_or_zero(value)

    @property
    def formatted_bytes(self) -> str:
        return format_bytes(self.bytes)

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.active_seconds)

    @property
    def formatted_bandwidth(self) -> str:
        return format_bandwidth(self.bps)
