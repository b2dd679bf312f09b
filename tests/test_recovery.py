import sqlite3

import pytest

from viewcounter.counting import PageCounter, VisitorSet
from viewcounter.exceptions import StoreError, StoreOpenError
from viewcounter.persistence.recovery import recover
from viewcounter.persistence.scheduler import PersistenceScheduler
from viewcounter.store.adapters.in_memory_adapter import InMemoryStoreFactory
from viewcounter.store.adapters.sqlite_adapter import SQLiteStoreFactory


def test_first_run_leaves_state_empty(memory_factory, counter, visitors, monitor_logs):
    report = recover(memory_factory, counter, visitors)
    assert report.first_run is True
    assert report.ok
    assert counter.get_count("home") == (0, False)
    assert visitors.count() == 0
    assert memory_factory.open_count == 0
    assert "recovery.first_run" in monitor_logs.text


def test_restores_exact_counts_from_sqlite(sqlite_factory):
    counter, visitors = PageCounter(), VisitorSet()
    for _ in range(3):
        counter.increment("home")
    counter.increment("home")
    counter.add_page("empty")
    visitors.record("1.2.3.4")
    visitors.record("5.6.7.8")
    sched = PersistenceScheduler(sqlite_factory, counter, visitors, interval=60)
    assert sched.run_once() is True
    sched.stop()

    fresh_counter, fresh_visitors = PageCounter(), VisitorSet()
    report = recover(SQLiteStoreFactory(sqlite_factory.path), fresh_counter, fresh_visitors)
    assert report.ok and not report.first_run
    assert report.pages_restored == 2
    assert report.visitors_restored == 2
    assert fresh_counter.get_count("home") == (4, True)
    assert fresh_counter.get_count("empty") == (0, True)
    assert fresh_visitors.count() == 2


def test_malformed_current_falls_back_to_empty(memory_factory, counter, visitors, monitor_logs):
    memory_factory.put_raw("historicData", "current", b"\xde\xad\xbe\xef")
    memory_factory.put_raw("historicData", "IPs", b'{"IPs": {"1.2.3.4": true}}')
    report = recover(memory_factory, counter, visitors)
    assert not report.ok
    assert counter.get_count("home") == (0, False)
    assert len(counter) == 0
    # the intact record is still restored
    assert visitors.count() == 1
    assert "recovery.decode.error" in monitor_logs.text


def test_missing_bucket_is_not_fatal(memory_factory, counter, visitors):
    memory_factory.open().close()
    report = recover(memory_factory, counter, visitors)
    assert not report.first_run
    assert len(report.errors) >= 2
    assert len(counter) == 0 and visitors.count() == 0


def test_missing_ips_key_keeps_pages(memory_factory, counter, visitors):
    memory_factory.put_raw("historicData", "current", b'{"PageCounts": {"home": 7}, "UniqueViews": 3}')
    report = recover(memory_factory, counter, visitors)
    assert counter.get_count("home") == (7, True)
    assert visitors.count() == 0
    assert len(report.errors) == 1


def test_recovery_assigns_rather_than_adds(memory_factory):
    memory_factory.put_raw("historicData", "current", b'{"PageCounts": {"home": 7}, "UniqueViews": 0}')
    memory_factory.put_raw("historicData", "IPs", b'{"IPs": {}}')
    counter = PageCounter()
    counter.increment("home")
    recover(memory_factory, counter, VisitorSet())
    assert counter.get_count("home") == (7, True)


def test_open_failure_propagates(counter, visitors):
    factory = InMemoryStoreFactory()
    factory.put_raw("historicData", "current", b"{}")
    factory.fail_open = True
    with pytest.raises(StoreOpenError):
        recover(factory, counter, visitors)


def test_corrupt_sqlite_file_is_fatal(db_path, counter, visitors):
    with open(db_path, "wb") as f:
        f.write(b"garbage" * 200)
    with pytest.raises(StoreOpenError):
        recover(SQLiteStoreFactory(db_path), counter, visitors)


def test_unreadable_schema_is_reported_as_store_error(db_path, counter, visitors):
    conn = sqlite3.connect(db_path)
    with conn:
        conn.execute("CREATE TABLE buckets(name TEXT PRIMARY KEY)")
        conn.execute("CREATE TABLE kv(bucket TEXT, key TEXT, payload BLOB, PRIMARY KEY(bucket, key))")
        conn.execute("INSERT INTO buckets(name) VALUES ('historicData')")
    conn.close()
    with pytest.raises(StoreError) as excinfo:
        recover(SQLiteStoreFactory(db_path), counter, visitors)
    assert isinstance(excinfo.value, StoreOpenError)
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)
    assert len(counter) == 0 and visitors.count() == 0
