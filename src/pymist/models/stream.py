"""Stream configuration and live statistics models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pymist.formatting import format_bandwidth, format_duration
from pymist.ingestion.normalize import int_or_zero, ordered_unique, safe_int, safe_str
from pymist.models._base import MistBaseModel


class StreamConfig(MistBaseModel):
    """One configured stream, online or not.

    Parameters
    ----------
    name : str
        Stream name (the key in the ``streams`` map).
    source : str or None
        Source URL, e.g. ``push://`` or ``rtmp://...``.
    tags : tuple of str
        Stream tags in the order the server lists them, without duplicates.
    online : int or None
        Server-reported online state (``1`` is online).
    raw : dict
        Full config entry, including fields not modelled here.
    """

    name: str
    source: str | None = None
    tags: tuple[str, ...] = ()
    online: int | None = None

    @field_validator("source", mode="before")
    @classmethod
    def _coerce_source(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> tuple[str, ...]:
        return ordered_unique(value)

    @field_validator("online", mode="before")
    @classmethod
    def _coerce_online(cls, value: Any) -> int | None:
        return safe_int(value)

    @property
    def is_online(self) -> bool:
        return self.online == 1


class StreamStat(MistBaseModel):
    """Live statistics for one stream.  Every counter defaults to 0."""

    name: str
    client_count: int = Field(default=0, validation_alias=AliasChoices("clients", "client_count"))
    bps_out: int = 0
    uptime: int = 0
    bytes_out: int = 0

    @field_validator("client_count", "bps_out", "uptime", "bytes_out", mode="before")
    @classmethod
    def _coerce_counters(cls, value: Any) -> int:
        return int_or_zero(value)

    @property
    def formatted_bandwidth(self) -> str:
        return format_bandwidth(self.bps_out)

    @property
    def formatted_uptime(self) -> str:
        return format_duration(self.uptime)
