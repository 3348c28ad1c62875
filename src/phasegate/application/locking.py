"""Per-id serialization for task and workflow mutations."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLocks:
    """Hands out one re-entrant lock per id.

    Locks are never released from the table, so two callers asking for the
    same id always get the same lock object.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self.lock_for(key):
            yield
