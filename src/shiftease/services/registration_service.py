"""Registration service: transactional register / unregister / promotion.

Each operation runs under the per-event lock and inside one database
transaction that locks the event row (SELECT ... FOR UPDATE), so the
capacity check, the insert and any promotion commit together. Concurrent
registrations for the last slot are serialized instead of racing.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from shiftease.auth.models import Caller
from shiftease.errors import (
    AdminNotAllowed,
    AlreadyRegistered,
    EventNotFound,
    NotAuthenticated,
    ShiftEaseError,
    StoreUnavailable,
)
from shiftease.models.event import Event
from shiftease.models.registration import Registration
from shiftease.services.event_locks import EventLockRegistry, event_locks
from shiftease.services.ledger import (
    LedgerEntry,
    RegistrationLedger,
    RegistrationStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class EventLists:
    """Persisted registration rows of one event, each list in append order"""

    confirmed: List[Registration] = field(default_factory=list)
    standby: List[Registration] = field(default_factory=list)

    def status_of(self, user_id: Optional[str]) -> Optional[RegistrationStatus]:
        if user_id is None:
            return None
        if any(row.user_id == user_id for row in self.confirmed):
            return RegistrationStatus.CONFIRMED
        if any(row.user_id == user_id for row in self.standby):
            return RegistrationStatus.STANDBY
        return None


@dataclass
class RegistrationResult:
    event: Event
    user_id: str
    status: RegistrationStatus
    registered_at: datetime
    confirmed_count: int
    standby_count: int


@dataclass
class UnregistrationResult:
    event_id: uuid.UUID
    user_id: str
    removed_from: RegistrationStatus
    promoted_user_id: Optional[str] = None


class RegistrationService:
    """Service for managing the confirmed/standby lists of events"""

    def __init__(self, db_session: Session, locks: EventLockRegistry = event_locks):
        self.db = db_session
        self.locks = locks

    # Queries
    def get_lists(self, event_id: uuid.UUID) -> EventLists:
        return self.lists_for_events([event_id]).get(event_id, EventLists())

    def lists_for_events(
        self, event_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, EventLists]:
        """Registration lists for several events with a single query"""
        ids = list(event_ids)
        if not ids:
            return {}
        rows = self.db.exec(
            select(Registration)
            .where(Registration.event_id.in_(ids))
            .order_by(Registration.position.asc())
            .execution_options(populate_existing=True)
        ).all()
        lists: Dict[uuid.UUID, EventLists] = {event_id: EventLists() for event_id in ids}
        for row in rows:
            target = lists[row.event_id]
            if row.status == RegistrationStatus.CONFIRMED:
                target.confirmed.append(row)
            else:
                target.standby.append(row)
        return lists

    # Mutations
    def register(
        self,
        event_id: uuid.UUID,
        caller: Optional[Caller],
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        """
        Register the caller for an event.

        Confirmed while regular capacity remains, otherwise standby while
        standby capacity remains.

        Raises:
            NotAuthenticated, AdminNotAllowed, EventNotFound,
            AlreadyRegistered, CapacityExceeded, StoreUnavailable
        """
        if caller is None:
            raise NotAuthenticated()
        if caller.is_admin:
            raise AdminNotAllowed()

        with self.locks.hold(event_id):
            try:
                event = self._lock_event(event_id)
                lists = self.get_lists(event_id)
                ledger = self._ledger(event, lists)

                outcome = ledger.register(caller.user_id, now=now)

                self.db.add(
                    Registration(
                        event_id=event.id,
                        user_id=caller.user_id,
                        status=outcome.status,
                        position=self._next_position(event),
                        registered_at=outcome.entry.registered_at,
                    )
                )
                self.db.commit()

            except ShiftEaseError:
                self.db.rollback()
                raise
            except IntegrityError as e:
                # Unique (event_id, user_id) caught a registration from another process
                self.db.rollback()
                raise AlreadyRegistered() from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error registering {caller.user_id} for {event_id}: {e}")
                raise StoreUnavailable() from e

            self.db.refresh(event)

        logger.info(
            f"Registered user {caller.user_id} for event {event_id} as {outcome.status.value}"
        )
        return RegistrationResult(
            event=event,
            user_id=caller.user_id,
            status=outcome.status,
            registered_at=outcome.entry.registered_at,
            confirmed_count=len(ledger.confirmed),
            standby_count=len(ledger.standby),
        )

    def unregister(
        self, event_id: uuid.UUID, caller: Optional[Caller]
    ) -> UnregistrationResult:
        """
        Remove the caller from an event.

        Leaving the confirmed list promotes the head of the standby queue in
        the same transaction.

        Raises:
            NotAuthenticated, EventNotFound, NotRegistered, StoreUnavailable
        """
        if caller is None:
            raise NotAuthenticated()

        with self.locks.hold(event_id):
            try:
                event = self._lock_event(event_id)
                lists = self.get_lists(event_id)
                ledger = self._ledger(event, lists)
                rows_by_user = {
                    row.user_id: row for row in lists.confirmed + lists.standby
                }

                outcome = ledger.unregister(caller.user_id)

                self.db.delete(rows_by_user[caller.user_id])
                if outcome.promoted is not None:
                    promoted_row = rows_by_user[outcome.promoted.user_id]
                    promoted_row.status = RegistrationStatus.CONFIRMED
                    promoted_row.position = self._next_position(event)
                    self.db.add(promoted_row)
                self.db.commit()

            except ShiftEaseError:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(
                    f"Error unregistering {caller.user_id} from {event_id}: {e}"
                )
                raise StoreUnavailable() from e

        promoted_user_id = outcome.promoted.user_id if outcome.promoted else None
        logger.info(
            f"Unregistered user {caller.user_id} from event {event_id} "
            f"({outcome.removed_from.value})"
        )
        if promoted_user_id:
            logger.info(f"Promoted user {promoted_user_id} from standby on {event_id}")

        return UnregistrationResult(
            event_id=event_id,
            user_id=caller.user_id,
            removed_from=outcome.removed_from,
            promoted_user_id=promoted_user_id,
        )

    def _lock_event(self, event_id: uuid.UUID) -> Event:
        event = self.db.exec(
            select(Event)
            .where(Event.id == event_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        if event is None:
            raise EventNotFound()
        return event

    def _ledger(self, event: Event, lists: EventLists) -> RegistrationLedger:
        return RegistrationLedger(
            capacity=event.capacity,
            standby_capacity=event.standby_capacity,
            confirmed=[_entry(row) for row in lists.confirmed],
            standby=[_entry(row) for row in lists.standby],
        )

    def _next_position(self, event: Event) -> int:
        position = event.registration_seq
        event.registration_seq = position + 1
        self.db.add(event)
        return position


def _entry(row: Registration) -> LedgerEntry:
    return LedgerEntry(user_id=row.user_id, registered_at=row.registered_at)
