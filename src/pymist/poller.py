"""Periodic refresh of the server snapshot.

The scheduler owns the refresh timer.  Each tick spawns a cycle as its own
task, so a slow cycle never delays the next tick; overlapping cycles are
skipped instead of queued.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import inspect
import logging
from collections.abc import Awaitable, Callable

from pymist._retry import RetryCoordinator
from pymist.exceptions import MistRequestError
from pymist.ingestion.aggregator import StateAggregator
from pymist.models.snapshot import Snapshot
from pymist.state.store import StateStore

_logger = logging.getLogger(__name__)

LivenessProbe = Callable[[], bool | Awaitable[bool]]
SnapshotListener = Callable[[Snapshot], None]


def _always_running() -> bool:
    return True


class PollOutcome(enum.StrEnum):
    """What a single refresh cycle did.

    ``STOPPED`` is also what :meth:`PollScheduler.poll_once` returns for
    every call made after :meth:`PollScheduler.stop`, until the next
    :meth:`PollScheduler.start`.
    """

    UPDATED = "updated"
    FAILED = "failed"
    SKIPPED_NOT_RUNNING = "skipped_not_running"
    SKIPPED_IN_FLIGHT = "skipped_in_flight"
    STOPPED = "stopped"


class PollScheduler:
    """Drive :class:`StateAggregator` on a fixed interval.

    Parameters
    ----------
    aggregator : StateAggregator
        Performs the aggregate sync.
    store : StateStore
        Receives each successful snapshot.
    retry : RetryCoordinator
        The coordinator used by *aggregator*; cancelled on :meth:`stop`.
    interval : float
        Seconds between ticks.
    probe : callable, optional
        Returns (or resolves to) whether the server process is running.
        A probe that raises counts as "not running".  Defaults to always
        running.

    Notes
    -----
    :meth:`stop` latches the scheduler: after it, :meth:`poll_once` does
    nothing and returns :attr:`PollOutcome.STOPPED` until :meth:`start` is
    called again.  :meth:`refresh` is not latched and still syncs on demand.
    """

    def __init__(
        self,
        aggregator: StateAggregator,
        store: StateStore,
        retry: RetryCoordinator,
        *,
        interval: float = 10.0,
        probe: LivenessProbe | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._store = store
        self._retry = retry
        self._interval = interval
        self._probe: LivenessProbe = probe or _always_running
        self._listeners: list[SnapshotListener] = []
        self._timer: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[PollOutcome]] = set()
        self._in_flight = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._stopping = False

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def set_probe(self, probe: LivenessProbe | None) -> None:
        self._probe = probe or _always_running

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register *listener* for new snapshots.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, *, immediate: bool = True) -> None:
        """Start the timer on the running loop.  No-op when already running.

        With *immediate* the first cycle runs right away instead of after
        one interval.
        """
        if self.is_running:
            return
        self._stopping = False
        self._retry.reset()
        self._timer = asyncio.get_running_loop().create_task(self._run(immediate))
        _logger.info("Polling started (interval %.1fs)", self._interval)

    async def stop(self) -> None:
        """Stop polling.

        Cancels the timer and any pending retry delay, then waits for a
        request already on the wire.  Its result is discarded.  Later
        :meth:`poll_once` calls return :attr:`PollOutcome.STOPPED` until
        :meth:`start`.
        """
        self._stopping = True
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        self._retry.cancel()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)
        await self._idle.wait()
        _logger.info("Polling stopped")

    async def _run(self, immediate: bool) -> None:
        if immediate:
            self._spawn_cycle()
        while True:
            await asyncio.sleep(self._interval)
            self._spawn_cycle()

    def _spawn_cycle(self) -> None:
        task = asyncio.get_running_loop().create_task(self.poll_once())
        self._cycles.add(task)
        task.add_done_callback(self._on_cycle_done)

    def _on_cycle_done(self, task: asyncio.Task[PollOutcome]) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Refresh cycle crashed", exc_info=exc)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def _server_running(self) -> bool:
        try:
            result = self._probe()
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            _logger.debug("Liveness probe raised; treating server as stopped", exc_info=True)
            return False
        return bool(result)

    async def poll_once(self) -> PollOutcome:
        """Run one refresh cycle and report what happened.

        Returns :attr:`PollOutcome.STOPPED` without touching the network once
        :meth:`stop` has been called and :meth:`start` has not.
        """
        if self._stopping:
            return PollOutcome.STOPPED
        if self._in_flight:
            _logger.debug("Refresh already in flight; skipping cycle")
            return PollOutcome.SKIPPED_IN_FLIGHT

        self._in_flight = True
        self._idle.clear()
        try:
            if not await self._server_running():
                _logger.debug("Server not running; skipping cycle")
                return PollOutcome.SKIPPED_NOT_RUNNING

            try:
                snapshot = await self._aggregator.refresh()
            except MistRequestError as exc:
                if self._stopping:
                    return PollOutcome.STOPPED
                _logger.warning("Refresh failed, keeping previous snapshot: %s", exc)
                return PollOutcome.FAILED

            if self._stopping:
                _logger.debug("Discarding snapshot fetched during shutdown")
                return PollOutcome.STOPPED

            self._store.replace(snapshot)
            self._notify(snapshot)
            return PollOutcome.UPDATED
        finally:
            self._in_flight = False
            self._idle.set()

    async def refresh(self) -> Snapshot:
        """Run one aggregate sync now, outside the timer.

        Shares the cycle guard with :meth:`poll_once`: when a cycle is
        already in flight this waits for it and returns the snapshot it
        stored instead of sending a second request.  Works while the timer
        is stopped.

        Raises :class:`~pymist.exceptions.MistRequestError` on failure, in
        which case the stored snapshot is unchanged.
        """
        while self._in_flight:
            version = self._store.version
            await self._idle.wait()
            if self._store.version != version:
                return self._store.current()

        # A stopped scheduler leaves retries cancelled.
        if not self.is_running:
            self._retry.reset()
        self._in_flight = True
        self._idle.clear()
        try:
            snapshot = await self._aggregator.refresh()
            self._store.replace(snapshot)
            self._notify(snapshot)
            return snapshot
        finally:
            self._in_flight = False
            self._idle.set()

    def _notify(self, snapshot: Snapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                _logger.exception("Snapshot listener %r failed", listener)
