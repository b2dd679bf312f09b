"""
Snapshot models and codec for persisting counter state.
"""

from viewcounter.snapshot.schemas import PageSnapshot, VisitorSnapshot
from viewcounter.snapshot.codec import (
    take_snapshot,
    encode_page_snapshot,
    encode_visitor_snapshot,
    decode_page_snapshot,
    decode_visitor_snapshot,
)

__all__ = [
    "PageSnapshot",
    "VisitorSnapshot",
    "take_snapshot",
    "encode_page_snapshot",
    "encode_visitor_snapshot",
    "decode_page_snapshot",
    "decode_visitor_snapshot",
]
