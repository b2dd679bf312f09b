"""Custom exception hierarchy for the view counter.

Having explicit exception types lets callers distinguish between failures
that must stop the process (the durable store cannot be opened at all) and
failures that are logged and tolerated (a single flush that did not commit,
a stored record that no longer decodes).
"""

from __future__ import annotations


class ViewCounterError(Exception):
    """Base class for all view counter errors."""


class StoreError(ViewCounterError):
    """Base class for durable store failures."""


class StoreOpenError(StoreError):
    """Raised when the durable store cannot be opened (fatal at startup)."""


class StoreWriteError(StoreError):
    """Raised when a write transaction fails to commit (recoverable)."""


class BucketNotFoundError(StoreError):
    """Raised when a bucket is read before it was ever created."""


class SnapshotError(ViewCounterError):
    """Base class for snapshot encode/decode failures."""


class SnapshotDecodeError(SnapshotError):
    """Raised when a stored record is present but malformed."""


class RecordMissingError(SnapshotError):
    """Raised when a record is decoded but the key was never written."""


__all__ = [
    "ViewCounterError",
    "StoreError",
    "StoreOpenError",
    "StoreWriteError",
    "BucketNotFoundError",
    "SnapshotError",
    "SnapshotDecodeError",
    "RecordMissingError",
]
