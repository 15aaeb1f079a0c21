"""Registration notices: building, dispatching and delivering them.

Notices are built only after the registration transaction has committed.
Dispatch either schedules delivery as a FastAPI background task or pushes
the notice onto the Redis queue drained by ``shiftease-notifier``. Delivery
is best effort: failures are logged and never reach the registrant.
"""

import enum
import logging
from datetime import date, datetime
from typing import Optional, Protocol

import redis
from fastapi import BackgroundTasks
from pydantic import BaseModel

from shiftease.backends.email_client import EmailClient
from shiftease.backends.notification_queue import NotificationQueue
from shiftease.config import config
from shiftease.models.database import get_redis
from shiftease.models.user import User
from shiftease.services.ledger import RegistrationStatus
from shiftease.services.registration_service import RegistrationResult
from shiftease.utils.names import display_name

logger = logging.getLogger(__name__)


class RegistrationKind(str, enum.Enum):
    REGULAR = "regular"
    STANDBY = "standby"


class RegistrationNotice(BaseModel):
    """What the organisers are told about a new registration"""

    event_id: str
    event_title: str
    event_date: Optional[date] = None
    event_time: str
    user_id: str
    user_name: str
    user_email: str
    user_phone: str
    kind: RegistrationKind
    registered_at: datetime
    current_capacity: str

    @classmethod
    def from_result(
        cls,
        result: RegistrationResult,
        user: Optional[User] = None,
        fallback_email: Optional[str] = None,
    ) -> "RegistrationNotice":
        event = result.event
        if result.status == RegistrationStatus.CONFIRMED:
            kind = RegistrationKind.REGULAR
            current_capacity = f"{result.confirmed_count}/{event.capacity or 'N/A'}"
        else:
            kind = RegistrationKind.STANDBY
            current_capacity = (
                f"{result.standby_count}/{event.standby_capacity or 'N/A'}"
            )

        start = event.start_time.strftime("%H:%M") if event.start_time else ""
        end = event.end_time.strftime("%H:%M") if event.end_time else ""

        return cls(
            event_id=str(event.id),
            event_title=event.title or "Unknown Event",
            event_date=event.event_date,
            event_time=f"{start} - {end}",
            user_id=result.user_id,
            user_name=display_name(user) or "Anonymous User",
            user_email=(user.email if user else None)
            or fallback_email
            or "No Email Provided",
            user_phone=(user.phone_number if user else None) or "Not Provided",
            kind=kind,
            registered_at=result.registered_at,
            current_capacity=current_capacity,
        )

    def subject(self) -> str:
        label = "Standby registration" if self.kind == RegistrationKind.STANDBY else "Registration"
        return f"[ShiftEase] {label}: {self.event_title}"

    def render_text(self) -> str:
        event_date = self.event_date.strftime("%d/%m/%Y") if self.event_date else "N/A"
        return "\n".join(
            [
                f"Event: {self.event_title}",
                f"Date: {event_date}",
                f"Time: {self.event_time}",
                "",
                f"Name: {self.user_name}",
                f"Email: {self.user_email}",
                f"Phone: {self.user_phone}",
                "",
                f"Registration type: {self.kind.value}",
                f"Registered at: {self.registered_at.strftime('%d/%m/%Y, %H:%M:%S')}",
                f"Current capacity: {self.current_capacity}",
            ]
        )


class NotificationService:
    """Delivers notices by email to the configured organiser inbox"""

    def __init__(
        self,
        email_client: Optional[EmailClient] = None,
        recipient: Optional[str] = None,
    ):
        self._email_client = email_client
        self.recipient = recipient or config["notification_email"]

    def _client(self) -> Optional[EmailClient]:
        if self._email_client is None:
            if not (config["mailgun_api_key"] and config["mailgun_domain"]):
                return None
            self._email_client = EmailClient(config)
        return self._email_client

    async def deliver(self, notice: RegistrationNotice) -> bool:
        """
        Send one notice.

        Returns:
            bool: True if the email was accepted, False otherwise
        """
        if not self.recipient:
            logger.info("No notification inbox configured, skipping notice")
            return False

        client = self._client()
        if client is None:
            logger.info("Mailgun is not configured, skipping notice")
            return False

        try:
            await client.send_email(
                to=self.recipient,
                subject=notice.subject(),
                text=notice.render_text(),
            )
            logger.info(
                f"Notice sent for user {notice.user_id} on event {notice.event_id}"
            )
            return True
        except Exception as e:
            logger.error(
                f"Failed to deliver notice for event {notice.event_id}: {e}"
            )
            return False


class NotificationDispatcher(Protocol):
    def dispatch(
        self, notice: RegistrationNotice, background_tasks: BackgroundTasks
    ) -> None: ...


class InlineDispatcher:
    """Deliver after the response has been sent, in the API process"""

    def __init__(self, service: NotificationService):
        self.service = service

    def dispatch(
        self, notice: RegistrationNotice, background_tasks: BackgroundTasks
    ) -> None:
        background_tasks.add_task(self.service.deliver, notice)


class QueueDispatcher:
    """Hand the notice to the notifier worker through Redis"""

    def __init__(self, queue: NotificationQueue):
        self.queue = queue

    def dispatch(
        self, notice: RegistrationNotice, background_tasks: BackgroundTasks
    ) -> None:
        try:
            self.queue.push(notice.model_dump(mode="json"))
        except redis.RedisError as e:
            logger.error(f"Failed to enqueue notice for event {notice.event_id}: {e}")


def get_notification_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency selecting the dispatcher for this deployment"""
    client = get_redis()
    if client is not None:
        return QueueDispatcher(NotificationQueue(client))
    return InlineDispatcher(NotificationService())
