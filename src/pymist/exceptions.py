"""Custom exception hierarchy for pymist."""

from __future__ import annotations

from enum import StrEnum


class NetworkFailureReason(StrEnum):
    """Why a request never produced an HTTP response."""

    CONNECTION_FAILED = "connection_failed"
    TIMEOUT = "timeout"
    DNS = "dns"
    TLS = "tls"
    OTHER = "other"


class MistError(Exception):
    """Base exception for all pymist errors."""


class MistConfigError(MistError):
    """Invalid or missing configuration."""


class MistRequestError(MistError):
    """A control API command did not produce a usable response."""

    def __init__(self, message: str, *, command: str | None = None) -> None:
        self.command = command
        super().__init__(message)


class MistMalformedRequestError(MistRequestError):
    """The command could not be serialized; nothing was sent."""


class MistNetworkError(MistRequestError):
    """Transport-level failure before any HTTP response was received.

    Only ``reason == CONNECTION_FAILED`` is considered transient: that is
    what a stopped or still-starting server produces.  Timeouts, DNS and
    TLS failures point at a different problem and are never retried.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: NetworkFailureReason,
        cause: BaseException | None = None,
        command: str | None = None,
    ) -> None:
        self.reason = reason
        self.cause = cause
        super().__init__(message, command=command)

    @property
    def is_transient(self) -> bool:
        return self.reason is NetworkFailureReason.CONNECTION_FAILED


class MistHTTPError(MistRequestError):
    """Server answered with a status other than 200."""

    def __init__(self, message: str, *, status_code: int, command: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, command=command)


class MistNoDataError(MistRequestError):
    """Server answered 200 with an empty body."""


class MistParseError(MistRequestError):
    """Response body is not JSON, or its top level is not an object."""
