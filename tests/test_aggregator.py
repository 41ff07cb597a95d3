from __future__ import annotations

from datetime import UTC, datetime

import pytest
from _fakes import FakeTransport, InstantRetry, refused

from pymist.exceptions import MistNetworkError, MistParseError
from pymist.ingestion.aggregator import StateAggregator, build_snapshot


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


_AGGREGATE_RESPONSE = {
    "active_streams": ["live"],
    "streams": {"live": {"source": "push://"}},
    "stats_streams": {"live": {"clients": 3, "bps_out": 150000}},
    "push_list": None,
    "clients": {"data": None},
}


@pytest.mark.asyncio
async def test_refresh_builds_snapshot_from_single_aggregate_call() -> None:
    transport = FakeTransport(_AGGREGATE_RESPONSE)
    aggregator = StateAggregator(InstantRetry(transport), clock=_dt)

    snapshot = await aggregator.refresh()

    assert snapshot.active_stream_names == frozenset({"live"})
    assert snapshot.configured_streams["live"].source == "push://"
    assert snapshot.stream_stats["live"].client_count == 3
    assert snapshot.stream_stats["live"].formatted_bandwidth == "150.0 Kbps"
    assert snapshot.pushes == {}
    assert snapshot.clients == {}
    assert snapshot.protocols == {}
    assert snapshot.fetched_at == _dt()

    assert transport.commands == [
        {
            "active_streams": True,
            "streams": True,
            "stats_streams": True,
            "push_list": True,
            "clients": {"fields": ["host", "stream", "protocol", "conntime", "sessId"]},
        }
    ]


@pytest.mark.asyncio
async def test_refresh_retries_refused_connections() -> None:
    transport = FakeTransport(refused(), _AGGREGATE_RESPONSE)
    retry = InstantRetry(transport)

    snapshot = await StateAggregator(retry, clock=_dt).refresh()

    assert transport.calls == 2
    assert retry.delays == [2.0]
    assert "live" in snapshot.configured_streams


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [refused(), MistParseError("bad body")])
async def test_refresh_propagates_request_errors(error: Exception) -> None:
    aggregator = StateAggregator(InstantRetry(FakeTransport(error), max_retries=0))

    with pytest.raises((MistNetworkError, MistParseError)):
        await aggregator.refresh()


def test_build_snapshot_isolates_malformed_facets() -> None:
    snapshot = build_snapshot(
        {
            "active_streams": "garbage",
            "streams": {"live": {"source": "push://"}},
            "stats_streams": ["not", "a", "map"],
            "push_list": {"1": {"stream": "live", "target": "rtmp://x/live/y"}},
            "clients": {"data": {"s1": {"stream": "live", "host": "10.0.0.1"}}},
            "config": {"protocols": [{"connector": "RTMP", "port": 1935}]},
        }
    )

    assert snapshot.active_stream_names == frozenset()
    assert snapshot.stream_stats == {}
    assert list(snapshot.configured_streams) == ["live"]
    assert list(snapshot.pushes) == ["1"]
    assert list(snapshot.clients_by_stream["live"]) == ["s1"]
    assert snapshot.protocols["RTMP"].enabled
    assert snapshot.fetched_at is None


def test_snapshot_helpers() -> None:
    snapshot = build_snapshot(
        {
            "stats_streams": {
                "a": {"clients": 2, "bps_out": 1000, "uptime": 60},
                "b": {"clients": 1, "bps_out": 500, "uptime": 120},
            },
            "push_list": {
                "1": {"stream": "a", "target": "rtmp://x/live/1"},
                "2": {"stream": "b", "target": "rtmp://x/live/2"},
                "3": {"stream": "a", "target": "rtmp://x/live/3"},
            },
            "clients": {"s1": {"stream": "a"}, "s2": {"stream": "b"}},
        }
    )

    assert set(snapshot.pushes_for_stream("a")) == {"1", "3"}
    assert snapshot.pushes_for_stream("missing") == {}
    assert snapshot.stream_config("missing") is None
    assert snapshot.total_viewers == 2
    assert not snapshot.is_empty

    stats = snapshot.aggregate_stats()
    assert stats.total_streams == 2
    assert stats.total_clients == 3
    assert stats.total_bandwidth == 1500
    assert stats.average_uptime == 90
    assert stats.formatted_bandwidth == "1.5 Kbps"
    assert stats.formatted_average_uptime == "1:30"
