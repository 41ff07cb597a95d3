"""In-memory holder of the current snapshot.

This is the only component that owns the snapshot consumers read.
"""

from __future__ import annotations

import logging

from pymist.models.snapshot import Snapshot

_logger = logging.getLogger(__name__)


class StateStore:
    """Hold exactly one :class:`Snapshot` at a time.

    Replacement is a single attribute assignment on the event loop, so a
    reader sees either the old snapshot or the new one, never a mix.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._snapshot = initial if initial is not None else Snapshot.empty()
        self._version = 0

    def replace(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._version += 1
        _logger.debug("Snapshot replaced (version %d)", self._version)

    def current(self) -> Snapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        """Number of replacements since construction."""
        return self._version
