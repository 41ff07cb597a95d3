"""HTTP transport for the JSON control API.

Every command is a single ``POST`` whose body is a JSON object keyed by
command name.  The transport performs exactly one attempt and maps every
outcome onto the :class:`~pymist.exceptions.MistRequestError` hierarchy.
"""

from __future__ import annotations

import json
import logging
import socket
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pymist._redact import redact_for_log
from pymist.config import MistConfig
from pymist.exceptions import (
    MistHTTPError,
    MistMalformedRequestError,
    MistNetworkError,
    MistNoDataError,
    MistParseError,
    NetworkFailureReason,
)

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the sync engine and command modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def execute(self, command: Mapping[str, Any], *, timeout: float | None = None) -> dict[str, Any]:
        ...


def command_label(command: Mapping[str, Any]) -> str:
    """Short name for a command object, used in logs and error messages."""
    return "+".join(str(key) for key in command) or "<empty>"


def classify_network_error(exc: BaseException) -> NetworkFailureReason:
    """Map an aiohttp/asyncio exception onto a :class:`NetworkFailureReason`.

    TLS and DNS problems are raised as subclasses of
    ``ClientConnectorError`` so they have to be checked first.
    """
    if isinstance(exc, (aiohttp.ClientConnectorCertificateError, aiohttp.ClientSSLError)):
        return NetworkFailureReason.TLS
    if isinstance(exc, aiohttp.ClientConnectorDNSError):
        return NetworkFailureReason.DNS
    if isinstance(exc, aiohttp.ClientConnectorError):
        if isinstance(exc.os_error, socket.gaierror):
            return NetworkFailureReason.DNS
        return NetworkFailureReason.CONNECTION_FAILED
    if isinstance(exc, TimeoutError):
        return NetworkFailureReason.TIMEOUT
    return NetworkFailureReason.OTHER


class HttpTransport:
    """Sends one command per call to the control endpoint."""

    def __init__(self, config: MistConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def execute(self, command: Mapping[str, Any], *, timeout: float | None = None) -> dict[str, Any]:
        """POST *command* and return the decoded response object.

        Raises
        ------
        MistMalformedRequestError
            *command* is not JSON-serializable.  No request is sent.
        MistNetworkError
            The request never got an HTTP response.
        MistHTTPError
            The server answered with a status other than 200.
        MistNoDataError
            The body was empty.
        MistParseError
            The body was not a JSON object.
        """
        label = command_label(command)
        try:
            body = json.dumps(dict(command), separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise MistMalformedRequestError(f"Command {label} is not serializable: {exc}", command=label) from exc

        headers = {"content-type": "application/json"}
        client_timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else self._config.query_timeout)
        url = self._config.api_url

        _logger.debug("POST %s %s", url, redact_for_log(command))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=client_timeout) as resp:
                status = resp.status
                raw = await resp.read()
        except (aiohttp.ClientError, TimeoutError) as exc:
            reason = classify_network_error(exc)
            raise MistNetworkError(
                f"Request {label} failed ({reason}): {exc!r}",
                reason=reason,
                cause=exc,
                command=label,
            ) from exc

        if status != 200:
            raise MistHTTPError(
                f"HTTP {status} for {label}: {raw[:200]!r}",
                status_code=status,
                command=label,
            )

        if not raw.strip():
            raise MistNoDataError(f"Empty response for {label}", command=label)

        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            raise MistParseError(f"Invalid JSON for {label}: {raw[:200]!r}", command=label) from exc

        if not isinstance(decoded, dict):
            raise MistParseError(
                f"Response for {label} is {type(decoded).__name__}, expected an object",
                command=label,
            )

        if self._config.api_trace_enabled:
            _logger.debug("Response %s: %s", label, redact_for_log(decoded))

        return decoded
