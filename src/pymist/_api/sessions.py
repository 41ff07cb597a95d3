"""Viewer session commands."""

from __future__ import annotations

from pymist._api._common import send_acked
from pymist._transport import Transport
from pymist.models.command_responses import CommandAck
from pymist.models.requests import SessionRequest, SessionTagRequest, StreamRequest, TagRequest


async def disconnect_session(transport: Transport, session_id: str) -> CommandAck:
    req = SessionRequest(session_id=session_id)
    return await send_acked(transport, {"stop_sessID": req.session_id})


async def kick_viewers(transport: Transport, stream: str) -> CommandAck:
    """Disconnect every viewer of *stream*.  They may reconnect."""
    req = StreamRequest(stream=stream)
    return await send_acked(transport, {"kick": req.stream})


async def force_reauth(transport: Transport, stream: str) -> CommandAck:
    """Make every viewer of *stream* re-run access control."""
    req = StreamRequest(stream=stream)
    return await send_acked(transport, {"reauth": req.stream})


async def tag_session(transport: Transport, session_id: str, tag: str) -> CommandAck:
    req = SessionTagRequest(session_id=session_id, tag=tag)
    return await send_acked(transport, {"tag_sessID": {"sessID": req.session_id, "tag": req.tag}})


async def stop_tagged_sessions(transport: Transport, tag: str) -> CommandAck:
    req = TagRequest(tag=tag)
    return await send_acked(transport, {"stop_tag": req.tag})
