"""Startup recovery of counter state from the durable store.

Runs once, synchronously, before any request can reach the counters. Only
failing to open an existing store is fatal; a missing bucket, a missing key
or a corrupt record is logged and recovery continues with whatever state it
managed to restore.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import platform_monitoring
from viewcounter.config import settings
from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.exceptions import BucketNotFoundError, SnapshotError
from viewcounter.persistence import metrics
from viewcounter.snapshot import decode_page_snapshot, decode_visitor_snapshot
from viewcounter.store.interface import StoreFactory


@dataclass
class RecoveryReport:
    first_run: bool = False
    pages_restored: int = 0
    visitors_restored: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _read(txn, bucket: str, key: str, report: RecoveryReport) -> Optional[bytes]:
    try:
        return txn.get(bucket, key)
    except BucketNotFoundError as e:
        report.errors.append(str(e))
        return None


def recover(
    store_factory: StoreFactory,
    counter: PageCounter,
    visitors: VisitorSet,
    bucket: str = settings.BUCKET,
) -> RecoveryReport:
    """Repopulate ``counter`` and ``visitors`` from the last flush.

    Page counts are assigned, not added, so the restored values match what
    was persisted exactly. StoreOpenError propagates to the caller.
    """
    report = RecoveryReport()
    if not store_factory.exists():
        report.first_run = True
        platform_monitoring.log_event("recovery.first_run", {"path": store_factory.path, "detail": "store not present; creating database"})
        return report

    platform_monitoring.log_event("recovery.start", {"path": store_factory.path, "detail": "store already exists; processing old entries"})
    store = store_factory.open()
    try:
        with store.read() as txn:
            current_raw = _read(txn, bucket, settings.CURRENT_KEY, report)
            ips_raw = _read(txn, bucket, settings.IPS_KEY, report)
    finally:
        store.close()

    try:
        page_snap = decode_page_snapshot(current_raw)
    except SnapshotError as e:
        report.errors.append(str(e))
        platform_monitoring.log_event("recovery.decode.error", {"key": settings.CURRENT_KEY, "error": str(e)})
    else:
        for page, count in page_snap.page_counts.items():
            counter.set_count(page, count)
            report.pages_restored += 1

    try:
        visitor_snap = decode_visitor_snapshot(ips_raw)
    except SnapshotError as e:
        report.errors.append(str(e))
        platform_monitoring.log_event("recovery.decode.error", {"key": settings.IPS_KEY, "error": str(e)})
    else:
        for visitor_id in visitor_snap.visitors:
            visitors.record(visitor_id)
            report.visitors_restored += 1

    metrics.inc("recover", bucket)
    platform_monitoring.log_event(
        "recovery.end",
        {"pages": report.pages_restored, "visitors": report.visitors_restored, "errors": len(report.errors)},
    )
    return report


__all__ = ["recover", "RecoveryReport"]
