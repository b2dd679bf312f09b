"""Background persistence of counter snapshots.

Each tick copies the page counts and visitor set under their shared locks,
encodes them, and writes three records in one transaction:

    <day key>  -> PageSnapshot   (one per calendar day, last flush wins)
    "current"  -> PageSnapshot
    "IPs"      -> VisitorSnapshot

Day keys are ``day_of_year * 10000 + year`` rendered as decimal text (day 5
of 2015 -> ``"52015"``). The format is kept for compatibility with existing
stores; note that neither lexicographic nor numeric key order is
chronological (``"3652015"`` sorts after ``"12016"``).
"""
from __future__ import annotations

import threading
import time
import traceback
from datetime import datetime
from typing import Optional

import platform_monitoring
from viewcounter.config import settings
from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.persistence import metrics
from viewcounter.snapshot import encode_page_snapshot, encode_visitor_snapshot, take_snapshot
from viewcounter.store.interface import DurableStore, StoreFactory

IDLE = "idle"
FLUSHING = "flushing"
STOPPED = "stopped"


def day_key(when: datetime) -> str:
    return str(when.timetuple().tm_yday * 10000 + when.year)


class PersistenceScheduler:
    """Flushes counter state to the durable store on a fixed interval.

    Responsibilities:
    - open the store once and keep it open until ``stop()``
    - ensure the bucket exists
    - run ``run_once`` every ``interval`` seconds on a daemon thread
    - contain every per-tick failure (logged + counted, never raised)
    """

    def __init__(
        self,
        store_factory: StoreFactory,
        counter: PageCounter,
        visitors: VisitorSet,
        interval: Optional[float] = None,
        bucket: str = settings.BUCKET,
    ):
        self.store_factory = store_factory
        self.counter = counter
        self.visitors = visitors
        self.interval = interval if interval is not None else settings.get_flush_interval()
        if self.interval <= 0:
            raise ValueError(f"flush interval must be positive, got {self.interval}")
        self.bucket = bucket
        self.store: Optional[DurableStore] = None
        self.state = IDLE
        self.last_flush_at: Optional[datetime] = None
        self._stop = threading.Event()
        self._flush_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def open(self) -> DurableStore:
        """Open the store and create the bucket. StoreOpenError propagates."""
        if self.store is None:
            store = self.store_factory.open()
            try:
                with store.write() as txn:
                    txn.create_bucket_if_not_exists(self.bucket)
            except Exception:
                store.close()
                raise
            self.store = store
        return self.store

    def run_once(self, now: Optional[datetime] = None) -> bool:
        """Perform one flush. Returns True when the transaction committed."""
        with self._flush_lock:
            self.state = FLUSHING
            start = time.time()
            now = now or datetime.now()
            key = day_key(now)
            platform_monitoring.log_event("scheduler.flush.start", {"bucket": self.bucket, "day_key": key, "at": now.isoformat()})
            try:
                store = self.open()
                page_snap, visitor_snap = take_snapshot(self.counter, self.visitors)
                page_bytes = encode_page_snapshot(page_snap)
                visitor_bytes = encode_visitor_snapshot(visitor_snap)
                with store.write() as txn:
                    txn.put(self.bucket, key, page_bytes)
                    txn.put(self.bucket, settings.CURRENT_KEY, page_bytes)
                    txn.put(self.bucket, settings.IPS_KEY, visitor_bytes)
            except Exception as exc:
                metrics.inc("flush_error", self.bucket)
                platform_monitoring.log_event(
                    "scheduler.flush.error",
                    {"bucket": self.bucket, "day_key": key, "error": str(exc), "trace": traceback.format_exc()},
                )
                return False
            finally:
                duration = (time.time() - start) * 1000.0
                metrics.observe("flush", self.bucket, duration)
                self.state = IDLE
            self.last_flush_at = now
            metrics.inc("flush", self.bucket)
            platform_monitoring.log_event(
                "scheduler.flush.end",
                {"bucket": self.bucket, "day_key": key, "pages": len(page_snap.page_counts), "unique_views": page_snap.unique_views, "ms": round(duration, 1)},
            )
            platform_monitoring.prometheus_metric("viewcounter_unique_views", page_snap.unique_views)
            return True

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self.open()
        self._stop.clear()
        self.state = IDLE
        self._thread = threading.Thread(target=self._run_loop, name="viewcounter-flush", daemon=True)
        self._thread.start()
        platform_monitoring.log_event("scheduler.start", {"path": self.store_factory.path, "interval": self.interval})

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def _run_loop(self) -> None:
        while not self._stop.wait(self.interval):
            platform_monitoring.log_event("scheduler.tick", {"bucket": self.bucket})
            try:
                self.run_once()
            except Exception:
                platform_monitoring.log_event("scheduler.loop.error", {"error": traceback.format_exc()})

    def stop(self, final_flush: bool = False, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        if final_flush and self.store is not None:
            self.run_once()
        if self.store is not None:
            self.store.close()
            self.store = None
        self.state = STOPPED
        platform_monitoring.log_event("scheduler.stop", {"path": self.store_factory.path})


__all__ = ["PersistenceScheduler", "day_key", "IDLE", "FLUSHING", "STOPPED"]
