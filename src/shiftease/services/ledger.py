"""Registration ledger: confirmed list and standby queue for one event.

Pure bookkeeping with no storage access. ``RegistrationService`` loads a
ledger from the persisted rows, applies one operation under the event lock
and writes the resulting change back in the same transaction.

Rules:
- Register appends to the confirmed list while it has room, otherwise to
  the standby queue while that has room, otherwise fails.
- Unregistering a confirmed user frees a slot; the head of the standby
  queue (longest waiting) is promoted into it.
- Unregistering a standby user never touches the confirmed list.
- A user is in at most one of the two lists.
"""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Iterable, Iterator, List, Optional

from shiftease.errors import AlreadyRegistered, CapacityExceeded, NotRegistered


class RegistrationStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    STANDBY = "standby"


@dataclass(frozen=True)
class LedgerEntry:
    user_id: str
    registered_at: datetime


class StandbyQueue:
    """FIFO queue of standby entries with removal by user id."""

    def __init__(self, entries: Iterable[LedgerEntry] = ()):
        self._entries: Deque[LedgerEntry] = deque(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self._entries)

    def __contains__(self, user_id: object) -> bool:
        return any(entry.user_id == user_id for entry in self._entries)

    def enqueue(self, entry: LedgerEntry) -> None:
        self._entries.append(entry)

    def peek(self) -> Optional[LedgerEntry]:
        return self._entries[0] if self._entries else None

    def dequeue_head(self) -> LedgerEntry:
        """Remove and return the longest-waiting entry."""
        if not self._entries:
            raise IndexError("dequeue from empty standby queue")
        return self._entries.popleft()

    def remove(self, user_id: str) -> Optional[LedgerEntry]:
        for entry in self._entries:
            if entry.user_id == user_id:
                self._entries.remove(entry)
                return entry
        return None


@dataclass
class RegisterOutcome:
    status: RegistrationStatus
    entry: LedgerEntry


@dataclass
class UnregisterOutcome:
    removed_from: RegistrationStatus
    entry: LedgerEntry
    promoted: Optional[LedgerEntry] = None


class RegistrationLedger:
    """Confirmed/standby bookkeeping for a single event."""

    def __init__(
        self,
        capacity: int,
        standby_capacity: int,
        confirmed: Iterable[LedgerEntry] = (),
        standby: Iterable[LedgerEntry] = (),
    ):
        if capacity < 0 or standby_capacity < 0:
            raise ValueError("capacities must be non-negative")
        self.capacity = capacity
        self.standby_capacity = standby_capacity
        self._confirmed: List[LedgerEntry] = list(confirmed)
        self.standby = StandbyQueue(standby)

    @property
    def confirmed(self) -> List[LedgerEntry]:
        return list(self._confirmed)

    def status_of(self, user_id: str) -> Optional[RegistrationStatus]:
        if any(entry.user_id == user_id for entry in self._confirmed):
            return RegistrationStatus.CONFIRMED
        if user_id in self.standby:
            return RegistrationStatus.STANDBY
        return None

    def has_confirmed_room(self) -> bool:
        return len(self._confirmed) < self.capacity

    def has_standby_room(self) -> bool:
        return len(self.standby) < self.standby_capacity

    def register(
        self, user_id: str, now: Optional[datetime] = None
    ) -> RegisterOutcome:
        if self.status_of(user_id) is not None:
            raise AlreadyRegistered()

        entry = LedgerEntry(
            user_id=user_id, registered_at=now or datetime.now(timezone.utc)
        )
        if self.has_confirmed_room():
            self._confirmed.append(entry)
            return RegisterOutcome(RegistrationStatus.CONFIRMED, entry)
        if self.has_standby_room():
            self.standby.enqueue(entry)
            return RegisterOutcome(RegistrationStatus.STANDBY, entry)
        raise CapacityExceeded()

    def unregister(self, user_id: str) -> UnregisterOutcome:
        for index, entry in enumerate(self._confirmed):
            if entry.user_id == user_id:
                del self._confirmed[index]
                promoted = None
                if len(self.standby) and self.has_confirmed_room():
                    promoted = self.standby.dequeue_head()
                    # Promotion keeps the original registered_at
                    self._confirmed.append(promoted)
                return UnregisterOutcome(
                    RegistrationStatus.CONFIRMED, entry, promoted=promoted
                )

        removed = self.standby.remove(user_id)
        if removed is None:
            raise NotRegistered()
        return UnregisterOutcome(RegistrationStatus.STANDBY, removed)
