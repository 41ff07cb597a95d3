"""Server state snapshot.

A :class:`Snapshot` is the one consistent view of the server produced by a
single aggregate sync.  It is immutable, facets included: every mapping
is a read-only view, so a refresh builds a new snapshot and the store
swaps it in whole.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

from pymist.formatting import format_bandwidth, format_duration
from pymist.models._frozen import ReadOnlyMap, empty_mapping
from pymist.models.client import ClientSession
from pymist.models.protocol import ProtocolState
from pymist.models.push import PushRecord
from pymist.models.stream import StreamConfig, StreamStat

PushId = NewType("PushId", str)
StreamName = NewType("StreamName", str)
SessionId = NewType("SessionId", str)


class AggregateStats(BaseModel):
    """Totals across all streams that currently report statistics."""

    model_config = ConfigDict(frozen=True)

    total_streams: int = 0
    total_clients: int = 0
    total_bandwidth: int = 0
    average_uptime: int = 0

    @property
    def formatted_bandwidth(self) -> str:
        return format_bandwidth(self.total_bandwidth)

    @property
    def formatted_average_uptime(self) -> str:
        return format_duration(self.average_uptime)


class Snapshot(BaseModel):
    """Immutable view of configured streams, live stats, pushes and clients.

    Cross references between facets are not enforced: a push may name a
    stream that is not configured, and a client may watch a stream with no
    stats entry.
    """

    model_config = ConfigDict(frozen=True)

    configured_streams: ReadOnlyMap[str, StreamConfig] = Field(default_factory=empty_mapping)
    active_stream_names: frozenset[str] = frozenset()
    stream_stats: ReadOnlyMap[str, StreamStat] = Field(default_factory=empty_mapping)
    pushes: ReadOnlyMap[str, PushRecord] = Field(default_factory=empty_mapping)
    clients: ReadOnlyMap[str, ClientSession] = Field(default_factory=empty_mapping)
    clients_by_stream: ReadOnlyMap[str, ReadOnlyMap[str, ClientSession]] = Field(default_factory=empty_mapping)
    protocols: ReadOnlyMap[str, ProtocolState] = Field(default_factory=empty_mapping)
    fetched_at: datetime.datetime | None = None

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return (
            not self.configured_streams
            and not self.active_stream_names
            and not self.stream_stats
            and not self.pushes
            and not self.clients
            and not self.protocols
        )

    def stream_config(self, name: str) -> StreamConfig | None:
        return self.configured_streams.get(name)

    def pushes_for_stream(self, stream_name: str) -> dict[PushId, PushRecord]:
        """Return the pushes whose source is *stream_name*, keyed by push id."""
        return {
            PushId(push_id): record for push_id, record in self.pushes.items() if record.stream_name == stream_name
        }

    def clients_for_stream(self, stream_name: str) -> Mapping[str, ClientSession]:
        return self.clients_by_stream.get(stream_name) or empty_mapping()

    @property
    def total_viewers(self) -> int:
        return len(self.clients)

    def aggregate_stats(self) -> AggregateStats:
        count = len(self.stream_stats)
        if not count:
            return AggregateStats()
        stats = self.stream_stats.values()
        total_uptime = sum(stat.uptime for stat in stats)
        return AggregateStats(
            total_streams=count,
            total_clients=sum(stat.client_count for stat in stats),
            total_bandwidth=sum(stat.bps_out for stat in stats),
            average_uptime=total_uptime // count,
        )
