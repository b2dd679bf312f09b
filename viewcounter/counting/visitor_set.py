"""Set of distinct visitor identifiers (typically client IP addresses)."""
from __future__ import annotations

from typing import FrozenSet, Set

from viewcounter.counting.rwlock import RWLock


class VisitorSet:
    """Grow-only visitor set with its own read-write lock.

    The lock is independent of ``PageCounter``'s: a page increment and the
    matching visitor record are not committed together.
    """

    def __init__(self) -> None:
        self.lock = RWLock()
        self._visitors: Set[str] = set()

    def record(self, visitor_id: str) -> bool:
        """Add ``visitor_id``. Returns True if it had not been seen before."""
        with self.lock.write_locked():
            if visitor_id in self._visitors:
                return False
            self._visitors.add(visitor_id)
            return True

    def count(self) -> int:
        with self.lock.read_locked():
            return len(self._visitors)

    def snapshot(self) -> FrozenSet[str]:
        with self.lock.read_locked():
            return self.copy_unlocked()

    def copy_unlocked(self) -> FrozenSet[str]:
        return frozenset(self._visitors)

    def __contains__(self, visitor_id: object) -> bool:
        with self.lock.read_locked():
            return visitor_id in self._visitors

    def __len__(self) -> int:
        return self.count()


__all__ = ["VisitorSet"]
