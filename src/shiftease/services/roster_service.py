"""Rosters: who holds the confirmed and standby slots of an event"""

import csv
import io
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session

from shiftease.models.event import Event
from shiftease.models.registration import Registration
from shiftease.models.user import User
from shiftease.services.event_service import EventService
from shiftease.services.ledger import RegistrationStatus
from shiftease.services.registration_service import RegistrationService
from shiftease.services.user_service import UserService
from shiftease.utils.names import avatar_color, display_name, initials

logger = logging.getLogger(__name__)

CSV_HEADER = ["Type", "Name", "Registered At"]
CSV_TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M"


@dataclass
class RosterEntry:
    user_id: str
    status: RegistrationStatus
    registered_at: datetime
    name: str
    email: Optional[str]
    phone_number: Optional[str]
    initials: str
    avatar_color: str


@dataclass
class Roster:
    event: Event
    confirmed: List[RosterEntry]
    standby: List[RosterEntry]


def _to_entry(row: Registration, user: Optional[User]) -> RosterEntry:
    profile = user or User(id=row.user_id)
    return RosterEntry(
        user_id=row.user_id,
        status=row.status,
        registered_at=row.registered_at,
        name=display_name(profile),
        email=profile.email,
        phone_number=profile.phone_number,
        initials=initials(profile),
        avatar_color=avatar_color(profile),
    )


class RosterService:
    def __init__(self, db_session: Session):
        self.db = db_session
        self.events = EventService(db_session)
        self.registrations = RegistrationService(db_session)
        self.users = UserService(db_session)

    def get_roster(self, event_id: uuid.UUID) -> Roster:
        """
        Confirmed and standby entries joined with the users' profiles,
        each list sorted by registration time
        """
        event = self.events.get_event(event_id)
        lists = self.registrations.get_lists(event_id)
        users = self.users.get_users_by_ids(
            row.user_id for row in lists.confirmed + lists.standby
        )

        def build(rows: List[Registration]) -> List[RosterEntry]:
            entries = [_to_entry(row, users.get(row.user_id)) for row in rows]
            return sorted(entries, key=lambda entry: entry.registered_at)

        return Roster(
            event=event,
            confirmed=build(lists.confirmed),
            standby=build(lists.standby),
        )

    def attendees(self, event_id: uuid.UUID) -> List[RosterEntry]:
        """Confirmed entrants in list order"""
        self.events.get_event(event_id)
        lists = self.registrations.get_lists(event_id)
        users = self.users.get_users_by_ids(row.user_id for row in lists.confirmed)
        return [_to_entry(row, users.get(row.user_id)) for row in lists.confirmed]


def roster_to_csv(roster: Roster) -> str:
    """Render a roster as CSV, every value quoted, rows joined by ``\\n``"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for label, entries in (("Regular", roster.confirmed), ("Standby", roster.standby)):
        for entry in entries:
            writer.writerow(
                [
                    label,
                    entry.name or "N/A",
                    entry.registered_at.strftime(CSV_TIMESTAMP_FORMAT)
                    if entry.registered_at
                    else "",
                ]
            )
    # No terminator after the last row
    return buffer.getvalue().rstrip("\n")


def csv_filename(event: Event) -> str:
    return f"{event.title or 'registrations'}.csv"
