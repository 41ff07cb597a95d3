"""Shared helpers for command modules.

Command modules send exactly one request per call through the transport,
never through the retry path: repeating a mutating command could apply
it twice.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pymist._transport import Transport, command_label
from pymist.models.command_responses import CommandAck

_logger = logging.getLogger(__name__)


def wire_id(value: str) -> str | int:
    """Send numeric ids as JSON numbers, which is how the server lists them."""
    return int(value) if value.isdigit() else value


async def send_command(
    transport: Transport,
    command: Mapping[str, Any],
    *,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Send *command* once and return the decoded response."""
    _logger.debug("Sending command %s", command_label(command))
    return await transport.execute(command, timeout=timeout)


async def send_acked(
    transport: Transport,
    command: Mapping[str, Any],
    *,
    timeout: float | None = None,
) -> CommandAck:
    response = await send_command(transport, command, timeout=timeout)
    return CommandAck(command=command_label(command), raw=response)
