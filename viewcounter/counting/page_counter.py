"""Per-page view counts guarded by a single read-write lock."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from viewcounter.counting.rwlock import RWLock


class PageCounter:
    """Mapping of page name -> view count.

    Writes (``increment``, ``add_page``, ``delete_page``, ``set_count``) take
    the exclusive lock; ``get_count`` and ``snapshot`` take the shared lock.
    A page that was never added is created at 1 by its first increment.
    """

    def __init__(self) -> None:
        self.lock = RWLock()
        self._counts: Dict[str, int] = {}

    def increment(self, page: str) -> int:
        with self.lock.write_locked():
            count = self._counts.get(page, 0) + 1
            self._counts[page] = count
        return count

    def add_page(self, page: str) -> None:
        # re-adding an existing page resets it
        with self.lock.write_locked():
            self._counts[page] = 0

    def delete_page(self, page: str) -> None:
        with self.lock.write_locked():
            self._counts.pop(page, None)

    def set_count(self, page: str, count: int) -> None:
        """Assign an exact count (used when restoring persisted state)."""
        if count < 0:
            raise ValueError(f"view count for '{page}' must be >= 0, got {count}")
        with self.lock.write_locked():
            self._counts[page] = count

    def get_count(self, page: str) -> Tuple[int, bool]:
        with self.lock.read_locked():
            if page in self._counts:
                return self._counts[page], True
        return 0, False

    def snapshot(self) -> Mapping[str, int]:
        with self.lock.read_locked():
            return self.copy_unlocked()

    def copy_unlocked(self) -> Mapping[str, int]:
        """Copy without locking; caller must already hold ``self.lock``."""
        return MappingProxyType(dict(self._counts))

    def __len__(self) -> int:
        with self.lock.read_locked():
            return len(self._counts)


__all__ = ["PageCounter"]
