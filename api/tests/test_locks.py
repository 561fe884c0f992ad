"""Tests for per-key locking."""
import threading
import time

from deptracker.core.locks import KeyedLock


class TestKeyedLock:

    def test_entries_are_reclaimed(self):
        locks = KeyedLock()
        with locks.hold("ENG-1"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_same_key_is_serialized(self):
        locks = KeyedLock()
        active = []
        overlaps = []

        def worker():
            with locks.hold("ENG-1"):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(True)
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == []
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = threading.Event()

        def other_key():
            with locks.hold("ENG-2"):
                entered.set()

        with locks.hold("ENG-1"):
            thread = threading.Thread(target=other_key)
            thread.start()
            assert entered.wait(timeout=2)
        thread.join()
