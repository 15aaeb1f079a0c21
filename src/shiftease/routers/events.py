"""Events router - event catalogue for users and administrators"""

import logging
import uuid
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from sqlmodel import Session

from shiftease.auth.dependencies import get_caller, require_admin
from shiftease.auth.models import Caller
from shiftease.config import config
from shiftease.errors import ValidationError
from shiftease.models.database import get_db
from shiftease.models.event import Event, EventCreate, EventUpdate
from shiftease.services.event_service import EventService
from shiftease.services.image_service import ImageService, get_image_service
from shiftease.services.ledger import RegistrationStatus
from shiftease.services.registration_service import EventLists, RegistrationService
from shiftease.utils.sample_events import generate_random_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])


class RegistrationOut(BaseModel):
    user_id: str
    registered_at: datetime


class EventOut(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    event_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    image_url: Optional[str] = None
    capacity: int
    standby_capacity: int
    registrations: List[RegistrationOut]
    standby_registrations: List[RegistrationOut]
    my_status: Optional[RegistrationStatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeleteAllResponse(BaseModel):
    deleted: int


def to_event_out(
    event: Event, lists: EventLists, user_id: Optional[str] = None
) -> EventOut:
    return EventOut(
        id=event.id,
        title=event.title,
        description=event.description,
        event_date=event.event_date,
        start_time=event.start_time,
        end_time=event.end_time,
        image_url=event.image_url,
        capacity=event.capacity,
        standby_capacity=event.standby_capacity,
        registrations=[
            RegistrationOut(user_id=row.user_id, registered_at=row.registered_at)
            for row in lists.confirmed
        ],
        standby_registrations=[
            RegistrationOut(user_id=row.user_id, registered_at=row.registered_at)
            for row in lists.standby
        ],
        my_status=lists.status_of(user_id),
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def _with_lists(
    db: Session, events: List[Event], user_id: Optional[str]
) -> List[EventOut]:
    lists = RegistrationService(db).lists_for_events(event.id for event in events)
    return [to_event_out(event, lists[event.id], user_id) for event in events]


@router.get("", response_model=List[EventOut], summary="List upcoming events")
def list_upcoming_events(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Events dated today or later, each with the caller's registration status"""
    events = EventService(db).list_upcoming()
    return _with_lists(db, events, caller.user_id)


@router.get("/archive", response_model=List[EventOut], summary="List past events")
def list_archived_events(
    admin: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    events = EventService(db).list_archive()
    return _with_lists(db, events, admin.user_id)


@router.post("", response_model=EventOut, status_code=201, summary="Create an event")
async def create_event(
    data: EventCreate,
    admin: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
    image_service: ImageService = Depends(get_image_service),
):
    if not data.image_url and config["enable_auto_event_image"]:
        try:
            image = await image_service.fetch_one(data.title)
            if image:
                data.image_url = image["url"]
        except Exception as e:
            logger.warning(f"Auto image lookup failed for '{data.title}': {e}")

    event = EventService(db).create_event(data)
    logger.info(f"Admin {admin.user_id} created event {event.id}")
    return to_event_out(event, EventLists(), admin.user_id)


@router.post(
    "/sample",
    response_model=EventOut,
    status_code=201,
    summary="Create a random test event",
)
def create_sample_event(
    admin: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    event = EventService(db).create_event(generate_random_event())
    return to_event_out(event, EventLists(), admin.user_id)


@router.delete("", response_model=DeleteAllResponse, summary="Delete every event")
def delete_all_events(
    confirm: bool = Query(False, description="Must be true to proceed"),
    admin: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not confirm:
        raise ValidationError("Pass confirm=true to delete all events")
    deleted = EventService(db).delete_all_events()
    logger.warning(f"Admin {admin.user_id} deleted all events")
    return DeleteAllResponse(deleted=deleted)


@router.get("/{event_id}", response_model=EventOut, summary="Get an event")
def get_event(
    event_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    event = EventService(db).get_event(event_id)
    lists = RegistrationService(db).get_lists(event_id)
    return to_event_out(event, lists, caller.user_id)


@router.patch("/{event_id}", response_model=EventOut, summary="Edit an event")
def edit_event(
    event_id: uuid.UUID,
    changes: EventUpdate,
    admin: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Overwrite scalar fields; registration lists are never replaced"""
    event = EventService(db).update_event(event_id, changes)
    lists = RegistrationService(db).get_lists(event_id)
    return to_event_out(event, lists, admin.user_id)


@router.delete("/{event_id}", status_code=204, summary="Delete an event")
def delete_event(
    event_id: uuid.UUID,
    admin: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    EventService(db).delete_event(event_id)
    logger.info(f"Admin {admin.user_id} deleted event {event_id}")
    return Response(status_code=204)
