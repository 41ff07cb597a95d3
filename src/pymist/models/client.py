"""Viewer/client session models."""

from __future__ import annotations

import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pymist.formatting import format_bytes
from pymist.ingestion.normalize import int_or_zero, safe_int, safe_str
from pymist.models._base import MistBaseModel


class ClientSession(MistBaseModel):
    """One connected viewer session.

    Parameters
    ----------
    session_id : str
        Session id (the key of the client map).
    host : str or None
        Remote address of the viewer.
    protocol : str or None
        Delivery protocol, e.g. ``HLS`` or ``WebRTC``.
    stream_name : str or None
        Stream being watched.  Sessions without one are kept in the flat
        client map but not indexed by stream.
    conntime : int or None
        Connection time in epoch seconds.
    """

    session_id: str = Field(validation_alias=AliasChoices("session_id", "sessId"))
    host: str | None = None
    protocol: str | None = None
    stream_name: str | None = Field(default=None, validation_alias=AliasChoices("stream_name", "stream"))
    conntime: int | None = None
    bytes_up: int = Field(default=0, validation_alias=AliasChoices("bytes_up", "up"))
    bytes_down: int = Field(default=0, validation_alias=AliasChoices("bytes_down", "down"))
    bps_down: int = Field(default=0, validation_alias=AliasChoices("bps_down", "downbps"))

    @field_validator("session_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @field_validator("host", "protocol", "stream_name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("conntime", mode="before")
    @classmethod
    def _coerce_conntime(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("bytes_up", "bytes_down", "bps_down", mode="before")
    @classmethod
    def _coerce_counters(cls, value: Any) -> int:
        return int_or_zero(value)

    @property
    def connected_at(self) -> datetime.datetime | None:
        if self.conntime is None or self.conntime <= 0:
            return None
        return datetime.datetime.fromtimestamp(self.conntime, tz=datetime.UTC)

    @property
    def formatted_bytes(self) -> str:
        return format_bytes(self.bytes_up + self.bytes_down)

    def connected_for(self, now: datetime.datetime) -> datetime.timedelta | None:
        """Return how long the session has been connected at *now*."""
        started = self.connected_at
        if started is None:
            return None
        return max(now - started, datetime.timedelta(0))
