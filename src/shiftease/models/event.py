"""Event model and the input schemas validated at the API boundary"""

import uuid
from datetime import date, datetime, time, timezone
from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_validator, model_validator
from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer
from sqlmodel import Field, SQLModel

# Longer values are silently cut to fit the dashboard cards
TITLE_MAX_LENGTH = 25
DESCRIPTION_MAX_LENGTH = 50


class Event(SQLModel, table=True):
    """Schedulable activity with confirmed and standby capacity.

    Registration lists live in ``event_registrations``; ``registration_seq``
    hands out the append position of the next registration row.
    """

    __tablename__ = "events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    description: str = Field(default="")
    event_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    image_url: Optional[str] = None

    capacity: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )
    standby_capacity: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )
    registration_seq: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_events_capacity_ge_0"),
        CheckConstraint(
            "standby_capacity >= 0", name="ck_events_standby_capacity_ge_0"
        ),
        Index("idx_events_date_start", "event_date", "start_time"),
    )


def _clean_title(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("Title is required")
    return value[:TITLE_MAX_LENGTH]


def _clean_description(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("Description is required")
    return value[:DESCRIPTION_MAX_LENGTH]


class EventCreate(BaseModel):
    """Fields an administrator supplies when creating an event.

    Capacities arrive from HTML forms as strings and are coerced to ints.
    """

    title: str
    description: str
    event_date: date
    start_time: time
    end_time: time
    image_url: Optional[str] = None
    capacity: int = PydanticField(ge=0)
    standby_capacity: int = PydanticField(default=0, ge=0)

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def _validate_description(cls, v: str) -> str:
        return _clean_description(v)

    @field_validator("image_url")
    @classmethod
    def _blank_image_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def _validate_times(self):
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class EventUpdate(BaseModel):
    """Partial edit of an event's scalar fields.

    Registration lists are not part of this schema: unknown keys such as
    ``registrations`` are ignored, so an edit never rewrites them.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    image_url: Optional[str] = None
    capacity: Optional[int] = PydanticField(default=None, ge=0)
    standby_capacity: Optional[int] = PydanticField(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_title(v)

    @field_validator("description")
    @classmethod
    def _validate_description(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_description(v)
