"""High-level async client for the MistServer control API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from pymist._api import pushes as _push_api
from pymist._api import server as _server_api
from pymist._api import sessions as _session_api
from pymist._api import streams as _stream_api
from pymist._retry import RetryCoordinator
from pymist._transport import HttpTransport, Transport
from pymist.config import MistConfig
from pymist.exceptions import MistError
from pymist.formatting import format_status_line
from pymist.ingestion.aggregator import StateAggregator
from pymist.models.command_responses import CommandAck, UpdateCheck, UpdateResult
from pymist.models.protocol import ProtocolState
from pymist.models.server import ConfigSummary, ServerStats
from pymist.models.snapshot import PushId, Snapshot
from pymist.poller import LivenessProbe, PollOutcome, PollScheduler
from pymist.state.store import StateStore

_logger = logging.getLogger(__name__)


class MistClient:
    """Async client keeping a local snapshot of one server.

    Usage::

        async with MistClient(MistConfig.from_env()) as client:
            snapshot = await client.refresh()
            client.start_polling()
    """

    def __init__(
        self,
        config: MistConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or MistConfig()
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport
        self._transport: Transport | None = None
        self._retry: RetryCoordinator | None = None
        self._aggregator: StateAggregator | None = None
        self._scheduler: PollScheduler | None = None
        self._store = StateStore()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MistClient:
        if self._injected_transport is not None:
            self._transport = self._injected_transport
        else:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        self._retry = RetryCoordinator(
            self._transport,
            max_retries=self._config.max_retries,
            backoff_step=self._config.retry_backoff_step,
        )
        self._aggregator = StateAggregator(self._retry)
        self._scheduler = PollScheduler(
            self._aggregator,
            self._store,
            self._retry,
            interval=self._config.poll_interval,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._scheduler is not None:
            await self._scheduler.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._scheduler = None
        self._aggregator = None
        self._retry = None
        self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise MistError("Client not initialized. Use 'async with MistClient(...)'")
        return self._transport

    def _require_scheduler(self) -> PollScheduler:
        if self._scheduler is None:
            raise MistError("Client not initialized. Use 'async with MistClient(...)'")
        return self._scheduler

    # ------------------------------------------------------------------
    # State synchronization
    # ------------------------------------------------------------------

    @property
    def config(self) -> MistConfig:
        return self._config

    @property
    def snapshot(self) -> Snapshot:
        return self._store.current()

    @property
    def store(self) -> StateStore:
        return self._store

    async def refresh(self) -> Snapshot:
        """Run one aggregate sync now and store the result.

        Raises :class:`~pymist.exceptions.MistRequestError` on failure, in
        which case the stored snapshot is unchanged.  When a polling cycle
        is already in flight, waits for it instead of sending a second
        request.
        """
        return await self._require_scheduler().refresh()

    async def poll_once(self) -> PollOutcome:
        """Run one polling cycle.  Returns ``STOPPED`` after :meth:`stop_polling`."""
        return await self._require_scheduler().poll_once()

    def start_polling(self, probe: LivenessProbe | None = None, *, immediate: bool = True) -> None:
        scheduler = self._require_scheduler()
        scheduler.set_probe(probe)
        scheduler.start(immediate=immediate)

    async def stop_polling(self) -> None:
        await self._require_scheduler().stop()

    @property
    def is_polling(self) -> bool:
        return self._scheduler is not None and self._scheduler.is_running

    def add_listener(self, listener: Callable[[Snapshot], None]) -> Callable[[], None]:
        return self._require_scheduler().add_listener(listener)

    def status_line(self, *, running: bool, server_type: str | None = None) -> str:
        """Summarize the current snapshot as a one-line status."""
        snapshot = self._store.current()
        return format_status_line(
            running=running,
            active_streams=len(snapshot.active_stream_names),
            pushes=len(snapshot.pushes),
            viewers=snapshot.total_viewers,
            server_type=server_type,
        )

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def add_stream(self, name: str, source: str | None = None, **options: Any) -> CommandAck:
        return await _stream_api.add_stream(self._require_transport(), name, source, **options)

    async def delete_stream(self, name: str) -> CommandAck:
        return await _stream_api.delete_stream(self._require_transport(), name)

    async def nuke_stream(self, name: str) -> CommandAck:
        return await _stream_api.nuke_stream(self._require_transport(), name)

    async def add_stream_tag(self, stream: str, tag: str) -> CommandAck:
        return await _stream_api.add_stream_tag(self._require_transport(), stream, tag)

    async def remove_stream_tag(self, stream: str, tag: str) -> CommandAck:
        return await _stream_api.remove_stream_tag(self._require_transport(), stream, tag)

    async def get_stream_tags(self, stream: str) -> tuple[str, ...]:
        return await _stream_api.get_stream_tags(self._require_transport(), stream)

    # ------------------------------------------------------------------
    # Pushes
    # ------------------------------------------------------------------

    async def start_push(self, stream: str, target: str) -> CommandAck:
        return await _push_api.start_push(self._require_transport(), stream, target)

    async def stop_push(self, push_id: PushId | str | int) -> CommandAck:
        return await _push_api.stop_push(self._require_transport(), push_id)

    async def stop_pushes_for_stream(self, stream: str) -> list[PushId]:
        """Stop the pushes of *stream* listed in the current snapshot."""
        return await _push_api.stop_pushes_for_stream(self._require_transport(), self._store.current(), stream)

    async def add_auto_push(self, stream_pattern: str, target: str) -> CommandAck:
        return await _push_api.add_auto_push(self._require_transport(), stream_pattern, target)

    async def remove_auto_push(self, rule_id: str | int) -> CommandAck:
        return await _push_api.remove_auto_push(self._require_transport(), rule_id)

    async def list_auto_pushes(self) -> list[Any]:
        return await _push_api.list_auto_pushes(self._require_transport())

    async def apply_push_settings(self, *, max_speed: int, wait: int, auto_restart: bool) -> CommandAck:
        return await _push_api.apply_push_settings(
            self._require_transport(), max_speed=max_speed, wait=wait, auto_restart=auto_restart
        )

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def disconnect_session(self, session_id: str) -> CommandAck:
        return await _session_api.disconnect_session(self._require_transport(), session_id)

    async def kick_viewers(self, stream: str) -> CommandAck:
        return await _session_api.kick_viewers(self._require_transport(), stream)

    async def force_reauth(self, stream: str) -> CommandAck:
        return await _session_api.force_reauth(self._require_transport(), stream)

    async def tag_session(self, session_id: str, tag: str) -> CommandAck:
        return await _session_api.tag_session(self._require_transport(), session_id, tag)

    async def stop_tagged_sessions(self, tag: str) -> CommandAck:
        return await _session_api.stop_tagged_sessions(self._require_transport(), tag)

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    async def get_config(self) -> dict[str, Any]:
        return await _server_api.get_config(self._require_transport())

    async def update_config(self, config: Mapping[str, Any]) -> CommandAck:
        return await _server_api.update_config(self._require_transport(), config)

    async def get_protocols(self) -> dict[str, ProtocolState]:
        return await _server_api.get_protocols(self._require_transport())

    async def restore_config(self, config: Mapping[str, Any]) -> CommandAck:
        return await _server_api.restore_config(self._require_transport(), config)

    async def save_config(self) -> CommandAck:
        return await _server_api.save_config(self._require_transport())

    async def get_config_summary(self) -> ConfigSummary:
        return await _server_api.get_config_summary(self._require_transport())

    async def get_server_stats(self) -> ServerStats:
        return await _server_api.get_server_stats(self._require_transport())

    async def check_update(self) -> UpdateCheck:
        return await _server_api.check_update(self._require_transport())

    async def perform_update(self) -> UpdateResult:
        return await _server_api.perform_update(self._require_transport(), timeout=self._config.update_timeout)

    async def shutdown(self) -> CommandAck:
        """Stop polling, then ask the server to shut down cleanly."""
        transport = self._require_transport()
        await self.stop_polling()
        return await _server_api.shutdown(transport)
