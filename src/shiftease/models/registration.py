"""SQLModel Registration model"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from shiftease.services.ledger import RegistrationStatus


class Registration(SQLModel, table=True):
    """One user's claim on a confirmed or standby slot of an event.

    ``position`` is the append order within the event; reading rows of one
    status ordered by position yields the list (or queue) in order.
    """

    __tablename__ = "event_registrations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(foreign_key="events.id", ondelete="CASCADE", index=True)
    user_id: str = Field(index=True)  # Identity provider subject
    status: RegistrationStatus = Field(
        sa_column=Column(
            SAEnum(
                RegistrationStatus,
                name="registration_status",
                native_enum=True,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
        ),
    )
    position: int = Field(sa_column=Column(Integer, nullable=False))
    registered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (
        UniqueConstraint(
            "event_id", "user_id", name="uq_event_registrations_event_user"
        ),
        Index("idx_event_registrations_event_position", "event_id", "position"),
    )
