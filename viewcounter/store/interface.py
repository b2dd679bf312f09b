"""Durable store contracts.

The counter treats the embedded key-value engine as a capability: bucketed
put/get executed inside transactions that either commit as a whole or not at
all. Any engine satisfying these Protocols can back the scheduler and the
recovery loader (SQLite file in production, a dict in tests).

How to Use:
    - Callers: type-hint against ``StoreFactory`` / ``DurableStore``.
    - Implementers: see ``adapters/sqlite_adapter.py`` and
      ``adapters/in_memory_adapter.py``.
"""
from __future__ import annotations

from typing import ContextManager, Optional, Protocol


class Transaction(Protocol):
    """Handle valid only inside a ``DurableStore.write()``/``read()`` block."""

    def create_bucket_if_not_exists(self, bucket: str) -> None:
        """Create ``bucket`` (write transactions only)."""

    def put(self, bucket: str, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``; raises BucketNotFoundError if the bucket is missing."""

    def get(self, bucket: str, key: str) -> Optional[bytes]:
        """Return the stored bytes or None; raises BucketNotFoundError if the bucket is missing."""


class DurableStore(Protocol):
    path: str

    def write(self) -> ContextManager[Transaction]:
        """Open one atomic read/write transaction. Commits on clean exit, rolls back on error."""

    def read(self) -> ContextManager[Transaction]:
        """Open a read-only transaction."""

    def close(self) -> None:
        """Release the underlying handle (idempotent)."""


class StoreFactory(Protocol):
    """Locates and opens a store; lets recovery tell 'first run' from 'open failed'."""

    path: str

    def exists(self) -> bool:
        """True when the backing file is already present."""

    def open(self) -> DurableStore:
        """Open (creating if needed). Raises StoreOpenError when that is impossible."""


__all__ = ["Transaction", "DurableStore", "StoreFactory"]
