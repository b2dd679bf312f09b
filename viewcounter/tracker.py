"""Visit tracker façade.

Owns one PageCounter and one VisitorSet and wires them to the recovery loader
and the persistence scheduler. Request handlers call ``record_view``; admin
and reporting code use the page management and query methods.

Usage:
    tracker = ViewTracker(build_store_factory())
    tracker.start()          # recover synchronously, then flush in background
    tracker.record_view("1.2.3.4", "home")
    ...
    tracker.stop()
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from viewcounter.config import settings
from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.persistence.recovery import RecoveryReport, recover
from viewcounter.persistence.scheduler import PersistenceScheduler
from viewcounter.store.interface import StoreFactory

logger = logging.getLogger("viewcounter")


class ViewTracker:
    def __init__(
        self,
        store_factory: StoreFactory,
        interval: Optional[float] = None,
        counter: Optional[PageCounter] = None,
        visitors: Optional[VisitorSet] = None,
    ):
        self.store_factory = store_factory
        self.counter = counter if counter is not None else PageCounter()
        self.visitors = visitors if visitors is not None else VisitorSet()
        self.scheduler = PersistenceScheduler(store_factory, self.counter, self.visitors, interval=interval)
        self.recovery: Optional[RecoveryReport] = None

    # -------- request path --------
    def record_view(self, visitor_id: str, page: str) -> int:
        """Count one view of ``page`` by ``visitor_id``; returns the page's new count."""
        logger.info("%s requests %s", visitor_id, page)
        count = self.counter.increment(page)
        # not atomic with the increment above; snapshots may see one without the other
        self.visitors.record(visitor_id)
        return count

    # -------- page management / queries --------
    def add_page(self, page: str) -> None:
        self.counter.add_page(page)

    def delete_page(self, page: str) -> None:
        self.counter.delete_page(page)

    def get_count(self, page: str) -> Tuple[int, bool]:
        return self.counter.get_count(page)

    def get_unique_visitor_count(self) -> int:
        return self.visitors.count()

    # -------- lifecycle --------
    def start(self) -> RecoveryReport:
        """Recover persisted state, then start background flushing.

        StoreOpenError from either step propagates; the caller should abort.
        """
        self.recovery = recover(self.store_factory, self.counter, self.visitors, bucket=self.scheduler.bucket)
        self.scheduler.start()
        return self.recovery

    def flush(self) -> bool:
        return self.scheduler.run_once()

    def stop(self, final_flush: Optional[bool] = None) -> None:
        if final_flush is None:
            final_flush = settings.FINAL_FLUSH
        self.scheduler.stop(final_flush=final_flush)


__all__ = ["ViewTracker"]
