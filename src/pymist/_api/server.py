"""Server-wide configuration and maintenance commands."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pymist._api._common import send_acked, send_command
from pymist._transport import Transport
from pymist.ingestion.facets import normalize_protocols
from pymist.ingestion.normalize import as_mapping
from pymist.ingestion.server import normalize_server_stats, summarize_config
from pymist.models.command_responses import CommandAck, UpdateCheck, UpdateResult
from pymist.models.protocol import ProtocolState
from pymist.models.server import ConfigSummary, ServerStats

_logger = logging.getLogger(__name__)


async def get_config(transport: Transport) -> dict[str, Any]:
    response = await send_command(transport, {"config": True})
    return as_mapping(response.get("config"))


async def update_config(transport: Transport, config: Mapping[str, Any]) -> CommandAck:
    """Merge *config* into the running server configuration."""
    if not isinstance(config, Mapping):
        raise TypeError("config must be a mapping")
    return await send_acked(transport, {"config": dict(config)})


async def get_protocols(transport: Transport) -> dict[str, ProtocolState]:
    response = await send_command(transport, {"config": {"protocols": True}})
    return normalize_protocols(response)


async def restore_config(transport: Transport, config: Mapping[str, Any]) -> CommandAck:
    """Replace the server configuration with a previously saved *config*."""
    if not isinstance(config, Mapping):
        raise TypeError("config must be a mapping")
    return await send_acked(transport, {"config_restore": dict(config)})


async def save_config(transport: Transport) -> CommandAck:
    return await send_acked(transport, {"save": True})


async def get_config_summary(transport: Transport) -> ConfigSummary:
    """Fetch the configuration with its streams and summarize it."""
    response = await send_command(transport, {"config": True, "streams": True})
    return summarize_config(response)


async def get_server_stats(transport: Transport) -> ServerStats:
    response = await send_command(transport, {"totals": True})
    return normalize_server_stats(response)


async def check_update(transport: Transport) -> UpdateCheck:
    response = await send_command(transport, {"checkupdate": True})
    result = UpdateCheck.from_response(response)
    if result.update_available is None:
        _logger.debug("Update check answered without a checkupdate object")
    return result


async def perform_update(transport: Transport, *, timeout: float) -> UpdateResult:
    """Ask the server to update itself.  Uses the long update *timeout*."""
    response = await send_command(transport, {"update": True}, timeout=timeout)
    return UpdateResult.from_response(response)


async def shutdown(transport: Transport) -> CommandAck:
    """Ask the server to shut down cleanly."""
    _logger.info("Requesting server shutdown")
    return await send_acked(transport, {"shutdown": True})
