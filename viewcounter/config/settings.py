"""Central configuration for the view counter.

Environment variables (a ``.env`` file in the working directory is loaded
first; real environment values win):

* VIEWCOUNTER_DB_PATH         -> store file path (default ``viewCounter.db``)
* VIEWCOUNTER_STORE_KIND      -> ``sqlite`` (default) or ``memory``
* VIEWCOUNTER_FLUSH_INTERVAL  -> seconds between flushes (default 600)
* VIEWCOUNTER_FINAL_FLUSH     -> flush once more on ``stop()`` (default true)

This file is the single source of truth; components must not hard-code the
bucket or key names.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

BUCKET = "historicData"
CURRENT_KEY = "current"
IPS_KEY = "IPs"

DEFAULT_DB_PATH = "viewCounter.db"
DEFAULT_FLUSH_INTERVAL = 600.0  # seconds

DB_PATH = os.getenv("VIEWCOUNTER_DB_PATH", DEFAULT_DB_PATH)
STORE_KIND = os.getenv("VIEWCOUNTER_STORE_KIND", "sqlite")
FINAL_FLUSH = os.getenv("VIEWCOUNTER_FINAL_FLUSH", "1").lower() in ("1", "true", "yes")


def get_flush_interval() -> float:
    """Return the flush interval in seconds.

    Reads VIEWCOUNTER_FLUSH_INTERVAL at call time so tests can monkeypatch the
    environment. Non-numeric or non-positive values raise ValueError.
    """
    raw = os.getenv("VIEWCOUNTER_FLUSH_INTERVAL")
    if not raw:
        return DEFAULT_FLUSH_INTERVAL
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"VIEWCOUNTER_FLUSH_INTERVAL must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"VIEWCOUNTER_FLUSH_INTERVAL must be positive, got {value}")
    return value


__all__ = [
    "BUCKET",
    "CURRENT_KEY",
    "IPS_KEY",
    "DB_PATH",
    "STORE_KIND",
    "FINAL_FLUSH",
    "DEFAULT_DB_PATH",
    "DEFAULT_FLUSH_INTERVAL",
    "get_flush_interval",
]
