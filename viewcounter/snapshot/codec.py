"""Snapshot capture and (de)serialization.

``take_snapshot`` copies both live structures under their shared locks and
releases them before any encoding or I/O happens. The encode/decode helpers
turn the resulting models into JSON bytes and back, separating "key was never
written" (``RecordMissingError``) from "value is corrupt"
(``SnapshotDecodeError``).
"""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import ValidationError

from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.exceptions import RecordMissingError, SnapshotDecodeError
from viewcounter.snapshot.schemas import PageSnapshot, VisitorSnapshot


def take_snapshot(counter: PageCounter, visitors: VisitorSet) -> Tuple[PageSnapshot, VisitorSnapshot]:
    # lock order is always counter -> visitors
    counter.lock.acquire_read()
    try:
        visitors.lock.acquire_read()
        try:
            counts = counter.copy_unlocked()
            seen = visitors.copy_unlocked()
        finally:
            visitors.lock.release_read()
    finally:
        counter.lock.release_read()
    page_snap = PageSnapshot(page_counts=dict(counts), unique_views=len(seen))
    visitor_snap = VisitorSnapshot(visitors=seen)
    return page_snap, visitor_snap


def encode_page_snapshot(snapshot: PageSnapshot) -> bytes:
    return snapshot.model_dump_json(by_alias=True).encode("utf-8")


def encode_visitor_snapshot(snapshot: VisitorSnapshot) -> bytes:
    return snapshot.model_dump_json(by_alias=True).encode("utf-8")


def _decode(model, raw: Optional[bytes], what: str):
    if raw is None:
        raise RecordMissingError(f"{what} record not present")
    try:
        return model.model_validate_json(raw)
    except (ValidationError, ValueError) as e:
        raise SnapshotDecodeError(f"{what} record is malformed: {e}") from e


def decode_page_snapshot(raw: Optional[bytes]) -> PageSnapshot:
    return _decode(PageSnapshot, raw, "page snapshot")


def decode_visitor_snapshot(raw: Optional[bytes]) -> VisitorSnapshot:
    return _decode(VisitorSnapshot, raw, "visitor snapshot")


__all__ = [
    "take_snapshot",
    "encode_page_snapshot",
    "encode_visitor_snapshot",
    "decode_page_snapshot",
    "decode_visitor_snapshot",
]
