"""Bounded retry for the aggregate sync call.

Only a refused connection is retried: that is what a server that is
stopped or still starting produces.  Mutating commands never pass through
here, since repeating them risks duplicate side effects.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pymist._transport import Transport, command_label
from pymist.exceptions import MistNetworkError

_logger = logging.getLogger(__name__)


class RetryCoordinator:
    """Wrap a :class:`Transport` with linear backoff on transient failures.

    The delay before retry *k* (1-indexed) is ``k * backoff_step`` seconds,
    so three retries wait 2, 4 and 6 seconds with the default step.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        max_retries: int = 3,
        backoff_step: float = 2.0,
    ) -> None:
        self._transport = transport
        self._max_retries = max_retries
        self._backoff_step = backoff_step
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Abandon pending backoff delays and refuse to schedule new ones."""
        self._cancelled.set()

    def reset(self) -> None:
        self._cancelled.clear()

    def backoff_delay(self, retry: int) -> float:
        return retry * self._backoff_step

    async def _pause(self, delay: float) -> bool:
        """Wait *delay* seconds.  Returns ``False`` if cancelled meanwhile."""
        if self._cancelled.is_set():
            return False
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
        except TimeoutError:
            return True
        return False

    async def execute_with_retry(
        self,
        command: Mapping[str, Any],
        *,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Execute *command*, retrying refused connections.

        The last :class:`~pymist.exceptions.MistNetworkError` is re-raised
        unchanged once retries are exhausted or abandoned; every other
        error propagates on the first attempt.
        """
        limit = self._max_retries if max_retries is None else max_retries
        label = command_label(command)
        retry = 0
        while True:
            try:
                return await self._transport.execute(command, timeout=timeout)
            except MistNetworkError as exc:
                if not exc.is_transient or retry >= limit:
                    raise
                retry += 1
                delay = self.backoff_delay(retry)
                _logger.info(
                    "Connection to server failed for %s, retry %d/%d in %.1fs",
                    label,
                    retry,
                    limit,
                    delay,
                )
                if not await self._pause(delay):
                    _logger.debug("Retry of %s abandoned on shutdown", label)
                    raise
