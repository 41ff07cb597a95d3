"""Stream configuration commands."""

from __future__ import annotations

from typing import Any

from pymist._api._common import send_acked, send_command
from pymist._transport import Transport
from pymist.ingestion.normalize import ordered_unique
from pymist.models.command_responses import CommandAck
from pymist.models.requests import AddStreamRequest, StreamRequest, StreamTagRequest


async def add_stream(
    transport: Transport,
    name: str,
    source: str | None = None,
    **options: Any,
) -> CommandAck:
    """Create or overwrite stream *name*.  Extra *options* become config fields."""
    req = AddStreamRequest(name=name, source=source, options=options)
    return await send_acked(transport, req.to_command())


async def delete_stream(transport: Transport, name: str) -> CommandAck:
    req = StreamRequest(stream=name)
    return await send_acked(transport, {"deletestream": req.stream})


async def nuke_stream(transport: Transport, name: str) -> CommandAck:
    """Forcibly shut down every process belonging to stream *name*."""
    req = StreamRequest(stream=name)
    return await send_acked(transport, {"nuke_stream": req.stream})


async def add_stream_tag(transport: Transport, stream: str, tag: str) -> CommandAck:
    req = StreamTagRequest(stream=stream, tag=tag)
    return await send_acked(transport, {"addtag": {"stream": req.stream, "tag": req.tag}})


async def remove_stream_tag(transport: Transport, stream: str, tag: str) -> CommandAck:
    req = StreamTagRequest(stream=stream, tag=tag)
    return await send_acked(transport, {"deltag": {"stream": req.stream, "tag": req.tag}})


async def get_stream_tags(transport: Transport, stream: str) -> tuple[str, ...]:
    """Return the tags of *stream*.

    The server answers with either a bare list or a map of stream name to
    list; both are accepted.
    """
    req = StreamRequest(stream=stream)
    response = await send_command(transport, {"stream_tags": req.stream})
    tags = response.get("stream_tags")
    if isinstance(tags, dict):
        tags = tags.get(req.stream)
    return ordered_unique(tags)
