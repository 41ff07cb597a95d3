"""Push commands.

Pushes are addressed by their server-assigned push id.  A stream name is
never a valid argument to ``push_stop``; :func:`stop_pushes_for_stream`
resolves the ids from a snapshot first.
"""

from __future__ import annotations

import logging
from typing import Any

from pymist._api._common import send_acked, send_command, wire_id
from pymist._transport import Transport
from pymist.models.command_responses import CommandAck
from pymist.models.requests import (
    AutoPushRequest,
    PushIdRequest,
    PushSettingsRequest,
    PushStartRequest,
    StreamRequest,
)
from pymist.models.snapshot import PushId, Snapshot

_logger = logging.getLogger(__name__)


async def start_push(transport: Transport, stream: str, target: str) -> CommandAck:
    req = PushStartRequest(stream=stream, target=target)
    return await send_acked(transport, {"push_start": {"stream": req.stream, "target": req.target}})


async def stop_push(transport: Transport, push_id: PushId | str | int) -> CommandAck:
    req = PushIdRequest(push_id=push_id)
    return await send_acked(transport, {"push_stop": wire_id(req.push_id)})


async def stop_pushes_for_stream(
    transport: Transport,
    snapshot: Snapshot,
    stream: str,
) -> list[PushId]:
    """Stop every push of *stream* known in *snapshot*.

    Returns the ids that were stopped.  A failure stops the sweep and
    propagates; pushes already stopped stay stopped.
    """
    req = StreamRequest(stream=stream)
    push_ids = list(snapshot.pushes_for_stream(req.stream))
    if not push_ids:
        _logger.debug("No pushes for stream %s", req.stream)
    stopped: list[PushId] = []
    for push_id in push_ids:
        await stop_push(transport, push_id)
        stopped.append(push_id)
    return stopped


async def add_auto_push(transport: Transport, stream_pattern: str, target: str) -> CommandAck:
    req = AutoPushRequest(stream=stream_pattern, target=target)
    return await send_acked(transport, {"push_auto_add": {"stream": req.stream, "target": req.target}})


async def remove_auto_push(transport: Transport, rule_id: str | int) -> CommandAck:
    req = PushIdRequest(push_id=rule_id)
    return await send_acked(transport, {"push_auto_remove": wire_id(req.push_id)})


async def list_auto_pushes(transport: Transport) -> list[Any]:
    response = await send_command(transport, {"push_auto_list": True})
    rules = response.get("push_auto_list", response.get("auto_push"))
    if isinstance(rules, dict):
        return list(rules.values())
    return list(rules) if isinstance(rules, list) else []


async def apply_push_settings(transport: Transport, *, max_speed: int, wait: int, auto_restart: bool) -> CommandAck:
    req = PushSettingsRequest(max_speed=max_speed, wait=wait, auto_restart=auto_restart)
    return await send_acked(transport, req.to_command())
