"""Composition point for durable store backends.

Testability: swap the backend via ``kind='memory'`` without touching callers.
"""

from __future__ import annotations

from typing import Optional

from viewcounter.config import settings
from viewcounter.store.interface import StoreFactory


def build_store_factory(kind: Optional[str] = None, path: Optional[str] = None) -> StoreFactory:
    kind = (kind or settings.STORE_KIND).lower()
    path = path or settings.DB_PATH
    if kind == "sqlite":
        from viewcounter.store.adapters.sqlite_adapter import SQLiteStoreFactory

        return SQLiteStoreFactory(path)
    elif kind == "memory":
        from viewcounter.store.adapters.in_memory_adapter import InMemoryStoreFactory

        return InMemoryStoreFactory(path)
    else:
        raise ValueError(f"Unknown store backend kind '{kind}'")


__all__ = ["build_store_factory"]
