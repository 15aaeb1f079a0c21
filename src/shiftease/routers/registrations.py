"""Registrations router - register, unregister, rosters and attendees"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Depends, Response
from pydantic import BaseModel
from sqlmodel import Session

from shiftease.auth.dependencies import get_caller, require_admin
from shiftease.auth.models import Caller
from shiftease.models.database import get_db
from shiftease.routers.events import EventOut, to_event_out
from shiftease.services.event_service import EventService
from shiftease.services.ledger import RegistrationStatus
from shiftease.services.notification_service import (
    NotificationDispatcher,
    RegistrationNotice,
    get_notification_dispatcher,
)
from shiftease.services.registration_service import RegistrationService
from shiftease.services.roster_service import (
    RosterEntry,
    RosterService,
    csv_filename,
    roster_to_csv,
)
from shiftease.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Registrations"])


class RegisterResponse(BaseModel):
    status: RegistrationStatus
    event: EventOut


class UnregisterResponse(BaseModel):
    removed_from: RegistrationStatus
    promoted_user_id: Optional[str] = None
    event: EventOut


class RosterEntryOut(BaseModel):
    user_id: str
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    registered_at: datetime


class RosterOut(BaseModel):
    event_id: uuid.UUID
    title: str
    capacity: int
    standby_capacity: int
    confirmed: List[RosterEntryOut]
    standby: List[RosterEntryOut]


class AttendeeOut(BaseModel):
    user_id: str
    name: str
    initials: str
    avatar_color: str


def _roster_entry_out(entry: RosterEntry) -> RosterEntryOut:
    return RosterEntryOut(
        user_id=entry.user_id,
        name=entry.name,
        email=entry.email,
        phone_number=entry.phone_number,
        registered_at=entry.registered_at,
    )


@router.post(
    "/{event_id}/registrations",
    response_model=RegisterResponse,
    status_code=201,
    summary="Register for an event",
)
def register_for_event(
    event_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Claim a confirmed slot, or a standby slot when the event is full"""
    result = RegistrationService(db).register(event_id, caller)

    # Committed; the notice must not affect the outcome
    try:
        user = UserService(db).get_user_by_id(caller.user_id)
        notice = RegistrationNotice.from_result(result, user, caller.email)
        dispatcher.dispatch(notice, background_tasks)
    except Exception as e:
        logger.error(f"Failed to dispatch notice for event {event_id}: {e}")

    lists = RegistrationService(db).get_lists(event_id)
    return RegisterResponse(
        status=result.status,
        event=to_event_out(result.event, lists, caller.user_id),
    )


@router.delete(
    "/{event_id}/registrations/me",
    response_model=UnregisterResponse,
    summary="Cancel my registration",
)
def unregister_from_event(
    event_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Leave an event; a freed confirmed slot goes to the head of the standby queue"""
    service = RegistrationService(db)
    result = service.unregister(event_id, caller)

    event = EventService(db).get_event(event_id)
    return UnregisterResponse(
        removed_from=result.removed_from,
        promoted_user_id=result.promoted_user_id,
        event=to_event_out(event, service.get_lists(event_id), caller.user_id),
    )


@router.get(
    "/{event_id}/registrations",
    response_model=RosterOut,
    summary="Event roster with user details",
)
def get_event_roster(
    event_id: uuid.UUID,
    _: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    roster = RosterService(db).get_roster(event_id)
    return RosterOut(
        event_id=roster.event.id,
        title=roster.event.title,
        capacity=roster.event.capacity,
        standby_capacity=roster.event.standby_capacity,
        confirmed=[_roster_entry_out(entry) for entry in roster.confirmed],
        standby=[_roster_entry_out(entry) for entry in roster.standby],
    )


@router.get("/{event_id}/registrations.csv", summary="Export the roster as CSV")
def export_event_roster(
    event_id: uuid.UUID,
    _: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    roster = RosterService(db).get_roster(event_id)
    filename = csv_filename(roster.event)
    return Response(
        content=roster_to_csv(roster),
        media_type="text/csv; charset=utf-8",
        headers={
            # RFC 5987 form so non-ASCII titles survive the header encoding
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"
        },
    )


@router.get(
    "/{event_id}/attendees",
    response_model=List[AttendeeOut],
    summary="Confirmed attendees",
)
def list_attendees(
    event_id: uuid.UUID,
    _: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return [
        AttendeeOut(
            user_id=entry.user_id,
            name=entry.name,
            initials=entry.initials,
            avatar_color=entry.avatar_color,
        )
        for entry in RosterService(db).attendees(event_id)
    ]
