"""Typed responses for mutating and auxiliary commands.

The server answers most commands with a fragment of its current state
rather than a status code.  Models here keep that raw payload for
callers that need more than the acknowledgement.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CommandAck(BaseModel):
    """Generic acknowledgement for commands with no typed result."""

    model_config = ConfigDict(frozen=True)

    command: str
    raw: dict[str, Any]


class UpdateCheck(BaseModel):
    """Result of a ``checkupdate`` query.

    ``update_available`` is ``None`` when the server answered without a
    ``checkupdate`` object.
    """

    model_config = ConfigDict(frozen=True)

    update_available: bool | None
    raw: dict[str, Any]

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> UpdateCheck:
        info = response.get("checkupdate")
        available: bool | None = None
        if isinstance(info, dict):
            available = info.get("update") is True
        return cls(update_available=available, raw=response)


class UpdateResult(BaseModel):
    """Result of an ``update`` command.  ``started`` is true when acknowledged."""

    model_config = ConfigDict(frozen=True)

    started: bool
    raw: dict[str, Any]

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> UpdateResult:
        return cls(started="update" in response, raw=response)
