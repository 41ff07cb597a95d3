from __future__ import annotations

import asyncio

import pytest
from _fakes import FakeTransport, GatedTransport, InstantRetry, refused

from pymist._retry import RetryCoordinator
from pymist.exceptions import MistHTTPError, MistNetworkError, NetworkFailureReason


@pytest.mark.asyncio
async def test_refused_connection_retries_with_linear_backoff_then_succeeds() -> None:
    transport = FakeTransport(refused(), refused(), {"ok": True})
    retry = InstantRetry(transport, max_retries=3)

    result = await retry.execute_with_retry({"streams": True})

    assert result == {"ok": True}
    assert transport.calls == 3
    assert retry.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_exhausted_retries_reraise_last_failure() -> None:
    last = refused()
    transport = FakeTransport(refused(), refused(), refused(), last)
    retry = InstantRetry(transport, max_retries=3)

    with pytest.raises(MistNetworkError) as excinfo:
        await retry.execute_with_retry({"streams": True})

    assert excinfo.value is last
    assert transport.calls == 4
    assert retry.delays == [2.0, 4.0, 6.0]


@pytest.mark.asyncio
async def test_http_error_is_not_retried() -> None:
    transport = FakeTransport(MistHTTPError("boom", status_code=500))
    retry = InstantRetry(transport)

    with pytest.raises(MistHTTPError):
        await retry.execute_with_retry({"streams": True})

    assert transport.calls == 1
    assert retry.delays == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reason",
    [NetworkFailureReason.TIMEOUT, NetworkFailureReason.DNS, NetworkFailureReason.TLS, NetworkFailureReason.OTHER],
)
async def test_non_transient_network_failures_are_not_retried(reason: NetworkFailureReason) -> None:
    transport = FakeTransport(MistNetworkError("nope", reason=reason))
    retry = InstantRetry(transport)

    with pytest.raises(MistNetworkError):
        await retry.execute_with_retry({"streams": True})

    assert transport.calls == 1


@pytest.mark.asyncio
async def test_per_call_retry_limit_overrides_default() -> None:
    transport = FakeTransport(refused())
    retry = InstantRetry(transport, max_retries=3)

    with pytest.raises(MistNetworkError):
        await retry.execute_with_retry({"streams": True}, max_retries=1)

    assert transport.calls == 2
    assert retry.delays == [2.0]


@pytest.mark.asyncio
async def test_timeout_is_forwarded_to_transport() -> None:
    transport = FakeTransport({"ok": True})
    retry = InstantRetry(transport)

    await retry.execute_with_retry({"update": True}, timeout=30.0)

    assert transport.timeouts == [30.0]


@pytest.mark.asyncio
async def test_cancel_abandons_pending_backoff() -> None:
    transport = FakeTransport(refused())
    retry = RetryCoordinator(transport, max_retries=3, backoff_step=60.0)

    task = asyncio.create_task(retry.execute_with_retry({"streams": True}))
    while transport.calls == 0:
        await asyncio.sleep(0)
    await asyncio.sleep(0)
    retry.cancel()

    with pytest.raises(MistNetworkError):
        await asyncio.wait_for(task, timeout=1.0)
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_cancelled_coordinator_schedules_no_retry_until_reset() -> None:
    transport = FakeTransport(refused(), {"ok": True})
    retry = InstantRetry(transport)
    retry.cancel()

    with pytest.raises(MistNetworkError):
        await retry.execute_with_retry({"streams": True})
    assert transport.calls == 1

    retry.reset()
    assert await retry.execute_with_retry({"streams": True}) == {"ok": True}


@pytest.mark.asyncio
async def test_in_flight_request_is_not_interrupted_by_cancel() -> None:
    transport = GatedTransport({"ok": True})
    retry = InstantRetry(transport)

    task = asyncio.create_task(retry.execute_with_retry({"streams": True}))
    await transport.entered.wait()
    retry.cancel()
    transport.release.set()

    assert await task == {"ok": True}
