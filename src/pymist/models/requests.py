"""Pydantic request models for command entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
A request that fails validation raises :class:`pydantic.ValidationError`
(a ``ValueError``) before anything is sent.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pymist._constants import (
    PUSH_TARGET_SCHEMES,
    STREAM_NAME_INVALID_CHARS,
    STREAM_NAME_MAX_LENGTH,
    STREAM_SOURCE_SCHEMES,
)


def _non_empty(value: str, label: str) -> str:
    text = value.strip()
    if not text:
        raise ValueError(f"{label} must be non-empty")
    return text


def validate_stream_name(value: str) -> str:
    name = _non_empty(value, "stream name")
    if any(char in STREAM_NAME_INVALID_CHARS for char in name):
        raise ValueError("stream name contains invalid characters")
    if len(name) > STREAM_NAME_MAX_LENGTH:
        raise ValueError(f"stream name is too long (max {STREAM_NAME_MAX_LENGTH} characters)")
    return name


class _Request(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )


class StreamRequest(_Request):
    """Request naming one existing stream."""

    stream: str

    @field_validator("stream")
    @classmethod
    def _stream_non_empty(cls, value: str) -> str:
        return _non_empty(value, "stream")


class AddStreamRequest(_Request):
    name: str
    source: str | None = None
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return validate_stream_name(value)

    @field_validator("source")
    @classmethod
    def _valid_source(cls, value: str | None) -> str | None:
        if value is None:
            return None
        source = _non_empty(value, "source")
        if not (source.startswith("/") or source.startswith(STREAM_SOURCE_SCHEMES)):
            raise ValueError(f"unsupported stream source: {source}")
        return source

    def to_command(self) -> dict[str, Any]:
        body: dict[str, Any] = dict(self.options)
        if self.source is not None:
            body["source"] = self.source
        return {"addstream": {self.name: body}}


class StreamTagRequest(StreamRequest):
    tag: str

    @field_validator("tag")
    @classmethod
    def _tag_non_empty(cls, value: str) -> str:
        return _non_empty(value, "tag")


class PushStartRequest(StreamRequest):
    target: str

    @field_validator("target")
    @classmethod
    def _valid_target(cls, value: str) -> str:
        target = _non_empty(value, "target")
        if not target.startswith(PUSH_TARGET_SCHEMES):
            raise ValueError(f"unsupported push target: {target}")
        return target


class AutoPushRequest(PushStartRequest):
    """Auto-push rule.  ``stream`` may be a pattern such as ``live+``."""


class PushIdRequest(_Request):
    push_id: str

    @field_validator("push_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("push_id")
    @classmethod
    def _id_non_empty(cls, value: str) -> str:
        return _non_empty(value, "push id")


class SessionRequest(_Request):
    session_id: str

    @field_validator("session_id")
    @classmethod
    def _id_non_empty(cls, value: str) -> str:
        return _non_empty(value, "session id")


class SessionTagRequest(SessionRequest):
    tag: str

    @field_validator("tag")
    @classmethod
    def _tag_non_empty(cls, value: str) -> str:
        return _non_empty(value, "tag")


class TagRequest(_Request):
    tag: str

    @field_validator("tag")
    @classmethod
    def _tag_non_empty(cls, value: str) -> str:
        return _non_empty(value, "tag")


class PushSettingsRequest(_Request):
    """Global push behaviour.

    ``max_speed`` caps push speed as a multiple of real time (0 means
    unlimited); ``wait`` is the delay in seconds before a failed push
    restarts.
    """

    max_speed: int = Field(ge=0)
    wait: int = Field(ge=0)
    auto_restart: bool

    def to_command(self) -> dict[str, Any]:
        return {"push_settings": {"maxspeed": self.max_speed, "wait": self.wait, "autorestart": self.auto_restart}}
