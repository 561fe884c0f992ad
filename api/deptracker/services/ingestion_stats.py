"""In-process counters for ingestion outcomes."""
import threading
from collections import Counter

FETCH_FAILED = "fetch_failed"
NOT_FOUND = "not_found"
PERSISTENCE_FAILED = "persistence_failed"
COLLABORATOR_FALLBACK = "collaborator_fallback"
INVALID_EVENT = "invalid_event"


class IngestionStats:
    """Thread-safe counters of processed events and failures by kind."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: Counter = Counter()
        self._failures: Counter = Counter()

    def record_event(self, event: str, status: str) -> None:
        with self._lock:
            self._events[f"{event}:{status}"] += 1

    def record_failure(self, kind: str) -> None:
        with self._lock:
            self._failures[kind] += 1

    def snapshot(self) -> dict:
        with self._lock:
            return {"events": dict(self._events), "failures": dict(self._failures)}

    def reset(self) -> None:
        with self._lock:
            self._events.clear()
            self._failures.clear()


ingestion_stats = IngestionStats()
