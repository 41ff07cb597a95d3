from __future__ import annotations

import asyncio

import pytest
from _fakes import FakeTransport, GatedTransport, InstantRetry, refused

from pymist._retry import RetryCoordinator
from pymist.exceptions import MistHTTPError
from pymist.ingestion.aggregator import StateAggregator, build_snapshot
from pymist.models.snapshot import Snapshot
from pymist.poller import PollOutcome, PollScheduler
from pymist.state.store import StateStore

_RESPONSE = {"active_streams": ["live"], "streams": {"live": {"source": "push://"}}}


def _scheduler(
    transport: FakeTransport,
    *,
    retry: RetryCoordinator | None = None,
    store: StateStore | None = None,
    **kwargs: object,
) -> tuple[PollScheduler, StateStore]:
    retry = retry or InstantRetry(transport)
    store = store or StateStore()
    return PollScheduler(StateAggregator(retry), store, retry, **kwargs), store  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_successful_cycle_replaces_snapshot_and_notifies_listeners() -> None:
    scheduler, store = _scheduler(FakeTransport(_RESPONSE))
    seen: list[Snapshot] = []
    scheduler.add_listener(seen.append)

    outcome = await scheduler.poll_once()

    assert outcome is PollOutcome.UPDATED
    assert store.current().active_stream_names == frozenset({"live"})
    assert seen == [store.current()]


@pytest.mark.asyncio
async def test_failed_cycle_keeps_previous_snapshot() -> None:
    previous = build_snapshot({"streams": {"old": {}}})
    transport = FakeTransport(MistHTTPError("boom", status_code=500))
    scheduler, store = _scheduler(transport, store=StateStore(previous))

    outcome = await scheduler.poll_once()

    assert outcome is PollOutcome.FAILED
    assert store.current() is previous
    assert store.version == 0


@pytest.mark.asyncio
async def test_not_running_probe_skips_network_entirely() -> None:
    transport = FakeTransport(_RESPONSE)
    scheduler, store = _scheduler(transport, probe=lambda: False)

    outcome = await scheduler.poll_once()

    assert outcome is PollOutcome.SKIPPED_NOT_RUNNING
    assert transport.calls == 0
    assert store.current().is_empty


@pytest.mark.asyncio
async def test_async_probe_is_awaited() -> None:
    async def probe() -> bool:
        return True

    transport = FakeTransport(_RESPONSE)
    scheduler, _ = _scheduler(transport, probe=probe)

    assert await scheduler.poll_once() is PollOutcome.UPDATED
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_raising_probe_counts_as_not_running() -> None:
    def probe() -> bool:
        raise OSError("ps failed")

    transport = FakeTransport(_RESPONSE)
    scheduler, _ = _scheduler(transport, probe=probe)

    assert await scheduler.poll_once() is PollOutcome.SKIPPED_NOT_RUNNING
    assert transport.calls == 0


@pytest.mark.asyncio
async def test_overlapping_cycle_is_skipped_not_queued() -> None:
    transport = GatedTransport(_RESPONSE)
    scheduler, store = _scheduler(transport)

    first = asyncio.create_task(scheduler.poll_once())
    await transport.entered.wait()
    assert scheduler.in_flight

    second = await scheduler.poll_once()
    assert second is PollOutcome.SKIPPED_IN_FLIGHT

    transport.release.set()
    assert await first is PollOutcome.UPDATED
    assert transport.calls == 1
    assert store.version == 1
    assert not scheduler.in_flight


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_the_cycle() -> None:
    scheduler, _ = _scheduler(FakeTransport(_RESPONSE))
    seen: list[Snapshot] = []

    def broken(snapshot: Snapshot) -> None:
        raise RuntimeError("listener bug")

    scheduler.add_listener(broken)
    scheduler.add_listener(seen.append)

    assert await scheduler.poll_once() is PollOutcome.UPDATED
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_unsubscribed_listener_is_not_called() -> None:
    scheduler, _ = _scheduler(FakeTransport(_RESPONSE))
    seen: list[Snapshot] = []
    unsubscribe = scheduler.add_listener(seen.append)
    unsubscribe()
    unsubscribe()

    await scheduler.poll_once()

    assert seen == []


@pytest.mark.asyncio
async def test_timer_runs_cycles_until_stopped() -> None:
    transport = FakeTransport(_RESPONSE)
    scheduler, store = _scheduler(transport, interval=0.01)

    scheduler.start()
    assert scheduler.is_running
    for _ in range(200):
        if store.version >= 2:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert store.version >= 2
    assert not scheduler.is_running
    calls = transport.calls
    await asyncio.sleep(0.05)
    assert transport.calls == calls


@pytest.mark.asyncio
async def test_stop_discards_result_of_in_flight_request() -> None:
    transport = GatedTransport(_RESPONSE)
    scheduler, store = _scheduler(transport, interval=60.0)

    scheduler.start()
    await transport.entered.wait()

    stopping = asyncio.create_task(scheduler.stop())
    await asyncio.sleep(0)
    assert not stopping.done()

    transport.release.set()
    await stopping

    assert transport.calls == 1
    assert store.version == 0
    assert store.current().is_empty


@pytest.mark.asyncio
async def test_stop_abandons_pending_retry_delay() -> None:
    transport = FakeTransport(refused())
    retry = RetryCoordinator(transport, max_retries=3, backoff_step=60.0)
    scheduler, store = _scheduler(transport, retry=retry, interval=60.0)

    scheduler.start()
    while transport.calls == 0:
        await asyncio.sleep(0)

    await asyncio.wait_for(scheduler.stop(), timeout=1.0)

    assert transport.calls == 1
    assert store.version == 0
    assert await scheduler.poll_once() is PollOutcome.STOPPED


@pytest.mark.asyncio
async def test_restart_after_stop_resumes_polling() -> None:
    transport = FakeTransport(_RESPONSE)
    scheduler, store = _scheduler(transport, interval=60.0)

    scheduler.start()
    await scheduler.stop()
    scheduler.start(immediate=True)
    for _ in range(100):
        if store.version:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert store.version >= 1


@pytest.mark.asyncio
async def test_refresh_notifies_listeners_and_reports_failures() -> None:
    transport = FakeTransport(_RESPONSE, MistHTTPError("boom", status_code=500))
    scheduler, store = _scheduler(transport)
    seen: list[Snapshot] = []
    scheduler.add_listener(seen.append)

    snapshot = await scheduler.refresh()
    with pytest.raises(MistHTTPError):
        await scheduler.refresh()

    assert seen == [snapshot]
    assert store.current() is snapshot
    assert store.version == 1
    assert not scheduler.in_flight


@pytest.mark.asyncio
async def test_poll_skips_while_refresh_in_flight() -> None:
    transport = GatedTransport(_RESPONSE)
    scheduler, store = _scheduler(transport)

    manual = asyncio.create_task(scheduler.refresh())
    await transport.entered.wait()

    assert await scheduler.poll_once() is PollOutcome.SKIPPED_IN_FLIGHT

    transport.release.set()
    await manual
    assert transport.calls == 1
    assert store.version == 1


@pytest.mark.asyncio
async def test_refresh_sends_its_own_request_when_the_awaited_cycle_failed() -> None:
    transport = GatedTransport(MistHTTPError("boom", status_code=500), _RESPONSE)
    scheduler, store = _scheduler(transport)

    polling = asyncio.create_task(scheduler.poll_once())
    await transport.entered.wait()
    manual = asyncio.create_task(scheduler.refresh())
    await asyncio.sleep(0)

    transport.release.set()
    assert await polling is PollOutcome.FAILED
    snapshot = await manual

    assert transport.calls == 2
    assert store.current() is snapshot
