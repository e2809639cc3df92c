"""
Per-key locking for single-writer sections.
"""
from contextlib import contextmanager
from threading import Lock
from typing import Dict, Hashable, List


class KeyedLock:
    """
    Hands out one lock per key, e.g. one per trip.

    A key's lock only lives while some thread holds or waits for it.
    """

    def __init__(self):
        self._lock = Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[Hashable, List] = {}

    def _acquire_entry(self, key: Hashable) -> Lock:
        with self._lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = [Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, key: Hashable):
        with self._lock:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key: Hashable):
        """Hold the lock for `key` for the duration of the block."""
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)


# Serializes payment bookkeeping within a trip process-wide; the trip row
# lock taken inside covers other workers
trip_locks = KeyedLock()
