"""Pending include directories: requested before workspace trust is known."""
from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class PendingQueue:
    """Directories waiting for the workspace trust verdict.

    Drained at most once per session: the first ``drain()`` latches the
    queue, and later calls return nothing. ``clear()`` runs after the
    drained paths were processed, whatever their outcome; failed paths
    are reported, not retried.
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._paths: list[str] = []
        self._drained = False
        self.enqueue(initial)

    def enqueue(self, paths: Iterable[str]) -> None:
        for path in paths:
            if path and path.strip():
                self._paths.append(path)

    def drain(self) -> list[str]:
        """Return the queued paths once; later calls return []."""
        if self._drained:
            logger.debug("Pending queue already drained")
            return []
        self._drained = True
        paths = list(self._paths)
        logger.debug("Draining %d pending director(ies)", len(paths))
        return paths

    def clear(self) -> None:
        self._paths.clear()

    @property
    def drained(self) -> bool:
        return self._drained

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self):
        return iter(list(self._paths))
