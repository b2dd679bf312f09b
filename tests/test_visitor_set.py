import threading

from viewcounter.counting import VisitorSet


def test_record_is_idempotent():
    v = VisitorSet()
    assert v.record("1.2.3.4") is True
    assert v.record("1.2.3.4") is False
    assert v.count() == 1
    assert "1.2.3.4" in v
    assert "5.6.7.8" not in v


def test_snapshot_is_frozen_copy():
    v = VisitorSet()
    v.record("1.2.3.4")
    snap = v.snapshot()
    v.record("5.6.7.8")
    assert snap == frozenset({"1.2.3.4"})
    assert len(v) == 2


def test_concurrent_records_count_distinct():
    v = VisitorSet()

    def add(offset):
        for i in range(200):
            v.record(f"10.0.{(offset + i) % 50}.{i % 7}")

    threads = [threading.Thread(target=add, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    expected = {f"10.0.{(n + i) % 50}.{i % 7}" for n in range(8) for i in range(200)}
    assert v.count() == len(expected)
