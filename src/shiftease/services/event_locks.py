"""Per-event in-process locks.

Ledger operations on one event are serialized within a process by these
locks and across processes by the row lock taken inside the transaction.
"""

import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator


class EventLockRegistry:
    """Hands out one lock per event id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[uuid.UUID, threading.Lock] = {}

    def _lock_for(self, event_id: uuid.UUID) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(event_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[event_id] = lock
            return lock

    @contextmanager
    def hold(self, event_id: uuid.UUID) -> Iterator[None]:
        lock = self._lock_for(event_id)
        with lock:
            yield

    def discard(self, event_id: uuid.UUID) -> None:
        """Forget the lock of a deleted event."""
        with self._guard:
            self._locks.pop(event_id, None)


# Process-wide registry shared by all service instances
event_locks = EventLockRegistry()
