"""
In-memory counting structures shared by request handlers, the persistence
scheduler and the recovery loader.
"""

from viewcounter.counting.page_counter import PageCounter
from viewcounter.counting.visitor_set import VisitorSet
from viewcounter.counting.rwlock import RWLock

__all__ = ["PageCounter", "VisitorSet", "RWLock"]
