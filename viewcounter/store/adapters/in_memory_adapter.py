"""In-memory durable store adapter.

Lightweight test/dummy backend implementing the DurableStore contract. The
factory owns the "file" (a dict of buckets) so a store can be closed and
reopened to simulate a process restart. Write transactions stage changes on a
copy and publish them only on clean exit, mirroring the all-or-nothing commit
of the SQLite adapter.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Set

from viewcounter.exceptions import BucketNotFoundError, StoreOpenError, StoreWriteError

_Buckets = Dict[str, Dict[str, bytes]]


class _InMemoryTransaction:
	def __init__(self, buckets: _Buckets, writable: bool, fail_keys: Set[str]) -> None:
		self._buckets = buckets
		self._writable = writable
		self._fail_keys = fail_keys

	def create_bucket_if_not_exists(self, bucket: str) -> None:
		if not self._writable:
			raise StoreWriteError("cannot create a bucket in a read-only transaction")
		self._buckets.setdefault(bucket, {})

	def put(self, bucket: str, key: str, value: bytes) -> None:
		if not self._writable:
			raise StoreWriteError("cannot put in a read-only transaction")
		if bucket not in self._buckets:
			raise BucketNotFoundError(f"bucket '{bucket}' does not exist")
		if key in self._fail_keys:
			raise StoreWriteError(f"injected write failure for key '{key}'")
		self._buckets[bucket][key] = bytes(value)

	def get(self, bucket: str, key: str) -> Optional[bytes]:
		if bucket not in self._buckets:
			raise BucketNotFoundError(f"bucket '{bucket}' does not exist")
		return self._buckets[bucket].get(key)


class InMemoryStore:
	def __init__(self, factory: "InMemoryStoreFactory") -> None:
		self._factory = factory
		self.path = factory.path
		self._closed = False

	@contextmanager
	def write(self) -> Iterator[_InMemoryTransaction]:
		with self._factory.lock:
			self._ensure_open()
			staged = copy.deepcopy(self._factory.buckets)
			yield _InMemoryTransaction(staged, writable=True, fail_keys=self._factory.fail_keys)
			self._factory.buckets = staged

	@contextmanager
	def read(self) -> Iterator[_InMemoryTransaction]:
		with self._factory.lock:
			self._ensure_open()
			yield _InMemoryTransaction(self._factory.buckets, writable=False, fail_keys=set())

	def _ensure_open(self) -> None:
		if self._closed:
			raise StoreWriteError(f"store at {self.path} is closed")

	def close(self) -> None:
		self._closed = True


class InMemoryStoreFactory:
	"""Holds the simulated file contents across open/close cycles.

	Test helpers:
	- ``fail_keys``: puts to these keys raise StoreWriteError.
	- ``fail_open``: when set, ``open()`` raises StoreOpenError.
	- ``put_raw``: write bytes directly, bypassing the codec.
	"""

	def __init__(self, path: str = "memory://viewCounter.db") -> None:
		self.path = path
		self.lock = threading.Lock()
		self.buckets: _Buckets = {}
		self.created = False
		self.fail_keys: Set[str] = set()
		self.fail_open = False
		self.open_count = 0

	def exists(self) -> bool:
		return self.created

	def open(self) -> InMemoryStore:
		if self.fail_open:
			raise StoreOpenError(f"injected open failure for {self.path}")
		self.created = True
		self.open_count += 1
		return InMemoryStore(self)

	def put_raw(self, bucket: str, key: str, value: bytes) -> None:
		with self.lock:
			self.created = True
			self.buckets.setdefault(bucket, {})[key] = value

	def get_raw(self, bucket: str, key: str) -> Optional[bytes]:
		with self.lock:
			return self.buckets.get(bucket, {}).get(key)


__all__ = ["InMemoryStore", "InMemoryStoreFactory"]
