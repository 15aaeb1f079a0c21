"""Event Service - Handles event catalogue database operations"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shiftease.errors import EventNotFound, StoreUnavailable, ValidationError
from shiftease.models.event import Event, EventCreate, EventUpdate
from shiftease.models.registration import Registration
from shiftease.services.event_locks import EventLockRegistry, event_locks
from shiftease.services.ledger import RegistrationStatus

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class EventService:
    """Service for creating, listing, editing and deleting events"""

    def __init__(self, db_session: Session, locks: EventLockRegistry = event_locks):
        self.db = db_session
        self.locks = locks

    def create_event(self, data: EventCreate) -> Event:
        """
        Create a new event with empty registration lists

        Args:
            data: Validated event fields

        Returns:
            The persisted Event
        """
        event = Event(**data.model_dump())
        try:
            self.db.add(event)
            self.db.commit()
            self.db.refresh(event)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating event: {e}")
            raise StoreUnavailable(f"Failed to create event: {str(e)}") from e

        logger.info(f"Event created successfully: {event.id}")
        return event

    def get_event(self, event_id: uuid.UUID) -> Event:
        event = self.db.get(Event, event_id)
        if event is None:
            raise EventNotFound()
        return event

    def list_upcoming(self, today: Optional[date] = None) -> List[Event]:
        """Events dated today or later, by date then start time"""
        today = today or utc_today()
        stmt = (
            select(Event)
            .where(Event.event_date >= today)
            .order_by(Event.event_date.asc(), Event.start_time.asc())
        )
        return list(self.db.exec(stmt).all())

    def list_archive(self, today: Optional[date] = None) -> List[Event]:
        """Past events, most recent first"""
        today = today or utc_today()
        stmt = (
            select(Event)
            .where(Event.event_date < today)
            .order_by(Event.event_date.desc(), Event.start_time.desc())
        )
        return list(self.db.exec(stmt).all())

    def registration_counts(self, event_id: uuid.UUID) -> Dict[RegistrationStatus, int]:
        rows = self.db.exec(
            select(Registration.status, func.count(Registration.id))
            .where(Registration.event_id == event_id)
            .group_by(Registration.status)
        ).all()
        counts = {status: 0 for status in RegistrationStatus}
        for status, count in rows:
            counts[RegistrationStatus(status)] = count
        return counts

    def update_event(self, event_id: uuid.UUID, changes: EventUpdate) -> Event:
        """
        Overwrite scalar fields of an event.

        Registration lists are left untouched. Lowering a capacity below the
        number of entries already holding it is rejected.

        Raises:
            EventNotFound: unknown event
            ValidationError: invalid time range or capacity below current count
        """
        updates = changes.model_dump(exclude_unset=True)

        with self.locks.hold(event_id):
            try:
                event = self.db.exec(
                    select(Event)
                    .where(Event.id == event_id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                ).first()
                if event is None:
                    raise EventNotFound()

                # Explicit nulls for required fields are ignored
                for field in ("title", "description", "event_date", "capacity",
                              "standby_capacity", "start_time", "end_time"):
                    if field in updates and updates[field] is None:
                        del updates[field]
                if "image_url" in updates and updates["image_url"] is not None:
                    updates["image_url"] = updates["image_url"].strip() or None

                start_time = updates.get("start_time", event.start_time)
                end_time = updates.get("end_time", event.end_time)
                if start_time and end_time and end_time < start_time:
                    raise ValidationError("end_time must not be before start_time")

                counts = self.registration_counts(event_id)
                confirmed = counts[RegistrationStatus.CONFIRMED]
                standby = counts[RegistrationStatus.STANDBY]
                if updates.get("capacity", event.capacity) < confirmed:
                    raise ValidationError(
                        f"Capacity cannot be lower than the {confirmed} confirmed registrations"
                    )
                if updates.get("standby_capacity", event.standby_capacity) < standby:
                    raise ValidationError(
                        f"Standby capacity cannot be lower than the {standby} standby registrations"
                    )

                for field, value in updates.items():
                    setattr(event, field, value)
                event.updated_at = datetime.now(timezone.utc)

                self.db.add(event)
                self.db.commit()
                self.db.refresh(event)

            except (EventNotFound, ValidationError):
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error updating event {event_id}: {e}")
                raise StoreUnavailable(f"Failed to update event: {str(e)}") from e

        logger.info(f"Event updated successfully: {event_id}")
        return event

    def delete_event(self, event_id: uuid.UUID) -> None:
        """Hard delete an event together with its registrations"""
        with self.locks.hold(event_id):
            try:
                event = self.db.get(Event, event_id)
                if event is None:
                    raise EventNotFound()
                self._delete_registrations(event_id)
                self.db.delete(event)
                self.db.commit()
            except EventNotFound:
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error deleting event {event_id}: {e}")
                raise StoreUnavailable(f"Failed to delete event: {str(e)}") from e
        self.locks.discard(event_id)

        logger.info(f"Event deleted: {event_id}")

    def delete_all_events(self) -> int:
        """Hard delete every event. Returns the number of events removed."""
        events = list(self.db.exec(select(Event)).all())
        event_ids = [event.id for event in events]
        try:
            for event in events:
                self._delete_registrations(event.id)
                self.db.delete(event)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting all events: {e}")
            raise StoreUnavailable(f"Failed to delete events: {str(e)}") from e

        for event_id in event_ids:
            self.locks.discard(event_id)
        logger.warning(f"Deleted all events ({len(event_ids)})")
        return len(event_ids)

    def _delete_registrations(self, event_id: uuid.UUID) -> None:
        rows = self.db.exec(
            select(Registration).where(Registration.event_id == event_id)
        ).all()
        for row in rows:
            self.db.delete(row)
