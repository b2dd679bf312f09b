"""
This module defines the __init__ file for the durable store adapters package.
"""

from viewcounter.store.adapters.in_memory_adapter import InMemoryStore, InMemoryStoreFactory
from viewcounter.store.adapters.sqlite_adapter import SQLiteStore, SQLiteStoreFactory

__all__ = ["InMemoryStore", "InMemoryStoreFactory", "SQLiteStore", "SQLiteStoreFactory"]
