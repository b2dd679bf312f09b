"""
In-process page view and unique visitor counter with periodic durable
snapshots.
"""

from viewcounter.tracker import ViewTracker
from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.store.factory import build_store_factory

__all__ = ["ViewTracker", "PageCounter", "VisitorSet", "build_store_factory"]
