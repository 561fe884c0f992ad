"""Per-key mutual exclusion for ingestion handlers."""
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """Hands out one lock per key, released entries are reclaimed.

    Webhook deliveries for the same issue key are serialized; deliveries for
    different keys run concurrently.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = defaultdict(int)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] += 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
