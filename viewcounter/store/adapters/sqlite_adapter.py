"""SQLite-backed durable store.

Buckets and keys live in two tables of a single database file::

    buckets(name TEXT PRIMARY KEY)
    kv(bucket TEXT, key TEXT, value BLOB, PRIMARY KEY(bucket, key))

Each ``write()`` block runs inside ``BEGIN IMMEDIATE`` ... ``COMMIT`` so the
three records of a flush land together or not at all. Each ``read()`` block is
one deferred transaction; the database runs in WAL mode so a reader keeps a
stable view while another connection commits. The connection is shared
across threads and serialized by a lock.
"""

from __future__ import annotations

import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import platform_monitoring
from viewcounter.exceptions import BucketNotFoundError, StoreOpenError, StoreWriteError

FILE_MODE = 0o600

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS buckets(name TEXT PRIMARY KEY)",
    """CREATE TABLE IF NOT EXISTS kv(
        bucket TEXT NOT NULL,
        key TEXT NOT NULL,
        value BLOB,
        PRIMARY KEY(bucket, key)
    )""",
)


class _SQLiteTransaction:
    def __init__(self, conn: sqlite3.Connection, writable: bool) -> None:
        self._conn = conn
        self._writable = writable

    def _require_bucket(self, bucket: str) -> None:
        cur = self._conn.execute("SELECT 1 FROM buckets WHERE name=? LIMIT 1", (bucket,))
        if cur.fetchone() is None:
            raise BucketNotFoundError(f"bucket '{bucket}' does not exist")

    def create_bucket_if_not_exists(self, bucket: str) -> None:
        if not self._writable:
            raise StoreWriteError("cannot create a bucket in a read-only transaction")
        self._conn.execute("INSERT OR IGNORE INTO buckets(name) VALUES (?)", (bucket,))

    def put(self, bucket: str, key: str, value: bytes) -> None:
        if not self._writable:
            raise StoreWriteError("cannot put in a read-only transaction")
        self._require_bucket(bucket)
        self._conn.execute(
            "INSERT OR REPLACE INTO kv(bucket, key, value) VALUES (?, ?, ?)",
            (bucket, key, sqlite3.Binary(value)),
        )

    def get(self, bucket: str, key: str) -> Optional[bytes]:
        self._require_bucket(bucket)
        cur = self._conn.execute("SELECT value FROM kv WHERE bucket=? AND key=?", (bucket, key))
        row = cur.fetchone()
        return bytes(row[0]) if row is not None and row[0] is not None else None


class SQLiteStore:
    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()
        created = not os.path.exists(path)
        dir_path = os.path.dirname(path)
        try:
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)
            # autocommit mode; transactions are issued explicitly below
            self._conn = sqlite3.connect(path, timeout=30, check_same_thread=False, isolation_level=None)
        except (sqlite3.Error, OSError) as e:
            raise StoreOpenError(f"cannot open store at {path}: {e}") from e
        try:
            self._conn.execute("PRAGMA journal_mode=WAL")
            for stmt in _SCHEMA:
                self._conn.execute(stmt)
        except sqlite3.Error as e:
            self._conn.close()
            raise StoreOpenError(f"store at {path} is unusable: {e}") from e
        if created:
            try:
                os.chmod(path, FILE_MODE)
            except OSError as e:
                platform_monitoring.log_event("store.chmod.error", {"path": path, "error": str(e)})
        self._closed = False

    @contextmanager
    def write(self) -> Iterator[_SQLiteTransaction]:
        with self._lock:
            self._ensure_open()
            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StoreWriteError(f"cannot begin write transaction: {e}") from e
            try:
                yield _SQLiteTransaction(self._conn, writable=True)
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback()
                raise StoreWriteError(f"write transaction failed: {e}") from e
            except BaseException:
                self._rollback()
                raise

    @contextmanager
    def read(self) -> Iterator[_SQLiteTransaction]:
        with self._lock:
            self._ensure_open()
            try:
                self._conn.execute("BEGIN")
            except sqlite3.Error as e:
                raise StoreOpenError(f"cannot begin read transaction on {self.path}: {e}") from e
            try:
                yield _SQLiteTransaction(self._conn, writable=False)
            except sqlite3.Error as e:
                raise StoreOpenError(f"store at {self.path} is unreadable: {e}") from e
            finally:
                # read-only; ending it releases the snapshot
                self._rollback()

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error:
            # no transaction active (COMMIT itself may have ended it)
            pass

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreWriteError(f"store at {self.path} is closed")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._conn.close()


class SQLiteStoreFactory:
    def __init__(self, path: str) -> None:
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def open(self) -> SQLiteStore:
        return SQLiteStore(self.path)


__all__ = ["SQLiteStore", "SQLiteStoreFactory", "FILE_MODE"]
