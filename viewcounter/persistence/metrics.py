"""In-process counters for the snapshot/persist/recover cycle.

Ops recorded against a bucket:

* ``flush``        -> committed flush transactions (latency observed for every
                      attempt, successful or not)
* ``flush_error``  -> ticks whose snapshot, encode or commit failed
* ``recover``      -> completed startup recoveries

The scheduler thread writes while reporting code reads, so all access goes
through one module lock. ``reset`` exists for tests.
"""
from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Dict, List, Tuple

_Key = Tuple[str, str]


@dataclass
class _Latency:
    samples: int = 0
    total_ms: float = 0.0
    min_ms: float = math.inf
    max_ms: float = 0.0
    last_ms: float = 0.0

    def add(self, ms: float) -> None:
        self.samples += 1
        self.total_ms += ms
        self.min_ms = min(self.min_ms, ms)
        self.max_ms = max(self.max_ms, ms)
        self.last_ms = ms


_lock = threading.Lock()
_counts: Dict[_Key, int] = {}
_latencies: Dict[_Key, _Latency] = {}


def inc(op: str, bucket: str) -> None:
    with _lock:
        _counts[(op, bucket)] = _counts.get((op, bucket), 0) + 1


def observe(op: str, bucket: str, ms: float) -> None:
    """Record how long one attempt of ``op`` took, in milliseconds."""
    with _lock:
        _latencies.setdefault((op, bucket), _Latency()).add(ms)


def count(op: str, bucket: str) -> int:
    with _lock:
        return _counts.get((op, bucket), 0)


def snapshot() -> List[Dict[str, object]]:
    """Rows sorted by (op, bucket); latency fields only where observed."""
    with _lock:
        keys = sorted(set(_counts) | set(_latencies))
        rows = []
        for op, bucket in keys:
            row: Dict[str, object] = {"op": op, "bucket": bucket, "count": _counts.get((op, bucket), 0)}
            lat = _latencies.get((op, bucket))
            if lat and lat.samples:
                row.update(
                    lat_min_ms=round(lat.min_ms, 2),
                    lat_max_ms=round(lat.max_ms, 2),
                    lat_avg_ms=round(lat.total_ms / lat.samples, 2),
                    lat_last_ms=round(lat.last_ms, 2),
                )
            rows.append(row)
    return rows


def reset() -> None:
    with _lock:
        _counts.clear()
        _latencies.clear()


__all__ = ["inc", "observe", "count", "snapshot", "reset"]
