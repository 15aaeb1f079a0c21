"""Tests for the per-event lock registry"""

import threading
import uuid

from shiftease.services.event_locks import EventLockRegistry


def test_same_event_shares_one_lock():
    registry = EventLockRegistry()
    event_id = uuid.uuid4()

    assert registry._lock_for(event_id) is registry._lock_for(event_id)
    assert registry._lock_for(event_id) is not registry._lock_for(uuid.uuid4())


def test_hold_serializes_critical_sections():
    registry = EventLockRegistry()
    event_id = uuid.uuid4()
    inside = []
    overlaps = []

    def work():
        with registry.hold(event_id):
            inside.append(1)
            if len(inside) > 1:
                overlaps.append(True)
            inside.pop()

    threads = [threading.Thread(target=work) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []


def test_other_events_are_not_blocked():
    registry = EventLockRegistry()
    first, second = uuid.uuid4(), uuid.uuid4()

    with registry.hold(first):
        assert registry._lock_for(second).acquire(blocking=False)
        registry._lock_for(second).release()


def test_discard_forgets_lock():
    registry = EventLockRegistry()
    event_id = uuid.uuid4()
    old = registry._lock_for(event_id)

    registry.discard(event_id)

    assert registry._lock_for(event_id) is not old
