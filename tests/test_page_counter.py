import threading
import unittest

from viewcounter.counting import PageCounter


class PageCounterTests(unittest.TestCase):
    def setUp(self):
        self.counter = PageCounter()

    def test_absent_page_reports_not_exists(self):
        self.assertEqual(self.counter.get_count("home"), (0, False))

    def test_increment_creates_page_at_one(self):
        self.assertEqual(self.counter.increment("home"), 1)
        self.assertEqual(self.counter.get_count("home"), (1, True))

    def test_add_page_initializes_to_zero(self):
        self.counter.add_page("about")
        self.assertEqual(self.counter.get_count("about"), (0, True))

    def test_add_page_resets_existing(self):
        for _ in range(3):
            self.counter.increment("about")
        self.counter.add_page("about")
        self.assertEqual(self.counter.get_count("about"), (0, True))

    def test_delete_page_removes_and_is_idempotent(self):
        self.counter.increment("home")
        self.counter.delete_page("home")
        self.assertEqual(self.counter.get_count("home"), (0, False))
        self.counter.delete_page("home")
        self.counter.delete_page("never-seen")
        self.assertEqual(self.counter.get_count("never-seen"), (0, False))

    def test_set_count_assigns_exact_value(self):
        self.counter.increment("home")
        self.counter.set_count("home", 41)
        self.assertEqual(self.counter.get_count("home"), (41, True))
        with self.assertRaises(ValueError):
            self.counter.set_count("home", -1)

    def test_snapshot_is_immutable_copy(self):
        self.counter.increment("home")
        snap = self.counter.snapshot()
        self.counter.increment("home")
        self.assertEqual(snap["home"], 1)
        with self.assertRaises(TypeError):
            snap["home"] = 5  # type: ignore[index]

    def test_len_counts_pages(self):
        self.counter.increment("a")
        self.counter.add_page("b")
        self.assertEqual(len(self.counter), 2)


def test_concurrent_increments_lose_nothing():
    counter = PageCounter()
    threads_n, per_thread = 16, 250
    barrier = threading.Barrier(threads_n)

    def hammer(i):
        barrier.wait()
        for _ in range(per_thread):
            counter.increment("home")
            counter.increment(f"page-{i % 4}")

    threads = [threading.Thread(target=hammer, args=(i,)) for i in range(threads_n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter.get_count("home") == (threads_n * per_thread, True)
    total = sum(counter.get_count(f"page-{j}")[0] for j in range(4))
    assert total == threads_n * per_thread
