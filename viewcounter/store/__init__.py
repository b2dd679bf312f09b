"""
Durable store contracts and adapters.

This package provides a standardized put/get-in-a-transaction interface over
the embedded key-value engine that persists counter snapshots.
"""

from viewcounter.store.interface import DurableStore, StoreFactory, Transaction
from viewcounter.store.factory import build_store_factory

__all__ = [
    "DurableStore",
    "StoreFactory",
    "Transaction",
    "build_store_factory",
]
