"""Aggregate sync: one request, one snapshot."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from typing import Any

from pymist._constants import build_aggregate_command
from pymist._retry import RetryCoordinator
from pymist.ingestion.facets import (
    normalize_active_streams,
    normalize_clients,
    normalize_protocols,
    normalize_push_list,
    normalize_stream_stats,
    normalize_streams,
)
from pymist.models.snapshot import Snapshot

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=datetime.UTC)


def build_snapshot(raw: dict[str, Any], *, fetched_at: datetime.datetime | None = None) -> Snapshot:
    """Assemble a :class:`Snapshot` from a decoded aggregate response.

    Every facet is normalized independently, so one malformed fragment
    leaves the others intact.
    """
    clients, clients_by_stream = normalize_clients(raw.get("clients"))
    return Snapshot(
        configured_streams=normalize_streams(raw.get("streams")),
        active_stream_names=normalize_active_streams(raw.get("active_streams")),
        stream_stats=normalize_stream_stats(raw.get("stats_streams")),
        pushes=normalize_push_list(raw.get("push_list")),
        clients=clients,
        clients_by_stream=clients_by_stream,
        protocols=normalize_protocols(raw),
        fetched_at=fetched_at,
    )


class StateAggregator:
    """Fetch every facet in a single request and build a snapshot."""

    def __init__(
        self,
        retry: RetryCoordinator,
        *,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self._retry = retry
        self._clock = clock

    async def refresh(self) -> Snapshot:
        """Run the aggregate sync.

        Raises the :class:`~pymist.exceptions.MistRequestError` of the
        failed request; no partial snapshot is ever returned.
        """
        raw = await self._retry.execute_with_retry(build_aggregate_command())
        snapshot = build_snapshot(raw, fetched_at=self._clock())
        _logger.debug(
            "Aggregate sync: %d streams (%d active), %d pushes, %d clients",
            len(snapshot.configured_streams),
            len(snapshot.active_stream_names),
            len(snapshot.pushes),
            len(snapshot.clients),
        )
        return snapshot
