"""Shared test configuration and fixtures for ShiftEase tests"""

import logging
import os
from datetime import date, time, timedelta
from typing import List, Optional

# Settings read at import time by shiftease.config / models.database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH0_DOMAIN"] = "shiftease-test.eu.auth0.com"
os.environ["ENABLE_AUTO_EVENT_IMAGE"] = "false"
os.environ.pop("REDIS_URL", None)
os.environ.pop("PEXELS_API_KEY", None)

import pytest
from fastapi import BackgroundTasks
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

from shiftease.auth.dependencies import get_current_user, get_current_user_optional
from shiftease.auth.models import AuthUser, Caller
from shiftease.errors import NotAuthenticated
from shiftease.main import app
from shiftease.models.database import get_db
from shiftease.models.event import EventCreate
from shiftease.models.user import UserRole
from shiftease.services.event_locks import EventLockRegistry
from shiftease.services.event_service import EventService, utc_today
from shiftease.services.feedback_service import FeedbackService
from shiftease.services.notification_service import (
    RegistrationNotice,
    get_notification_dispatcher,
)
from shiftease.services.registration_service import RegistrationService
from shiftease.services.roster_service import RosterService
from shiftease.services.user_service import UserService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def engine(tmp_path):
    """SQLite database file private to one test"""
    db_path = tmp_path / "shiftease.db"
    engine = create_engine(
        f"sqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def _db_session(engine):
    """Private DB session for fixtures only.

    Prefer the service fixtures below in tests.
    """
    session = Session(engine)
    yield session
    session.close()


@pytest.fixture
def event_locks():
    return EventLockRegistry()


@pytest.fixture
def event_service(_db_session, event_locks):
    return EventService(_db_session, locks=event_locks)


@pytest.fixture
def registration_service(_db_session, event_locks):
    return RegistrationService(_db_session, locks=event_locks)


@pytest.fixture
def user_service(_db_session):
    return UserService(_db_session)


@pytest.fixture
def feedback_service(_db_session):
    return FeedbackService(_db_session)


@pytest.fixture
def roster_service(_db_session):
    return RosterService(_db_session)


@pytest.fixture
def make_event(event_service):
    """Create a persisted event; capacities default to 1 confirmed / 1 standby"""

    def _make_event(
        capacity: int = 1,
        standby_capacity: int = 1,
        title: str = "Beach cleanup",
        event_date: Optional[date] = None,
        start_time: time = time(9, 0),
        end_time: time = time(12, 0),
    ):
        return event_service.create_event(
            EventCreate(
                title=title,
                description="Bring gloves and water",
                event_date=event_date or utc_today() + timedelta(days=7),
                start_time=start_time,
                end_time=end_time,
                capacity=capacity,
                standby_capacity=standby_capacity,
            )
        )

    return _make_event


@pytest.fixture
def make_caller():
    def _make_caller(user_id: str, role: UserRole = UserRole.USER) -> Caller:
        return Caller(user_id=user_id, email=f"{user_id}@example.com", role=role)

    return _make_caller


class RecordingDispatcher:
    """Keeps dispatched notices in memory instead of sending them"""

    def __init__(self):
        self.notices: List[RegistrationNotice] = []

    def dispatch(
        self, notice: RegistrationNotice, background_tasks: BackgroundTasks
    ) -> None:
        self.notices.append(notice)


@pytest.fixture
def notices():
    return RecordingDispatcher()


class ApiHarness:
    """TestClient plus a switchable identity for the bearer-token dependency"""

    def __init__(self, client: TestClient, session: Session):
        self.client = client
        self.session = session
        self.current_user: Optional[AuthUser] = None

    def login(self, user_id: str, admin: bool = False, email: Optional[str] = None):
        self.current_user = AuthUser(
            user_id=user_id,
            email=email or f"{user_id}@example.com",
            claims={"iss": f"https://{os.environ['AUTH0_DOMAIN']}/"},
        )
        if admin:
            UserService(self.session).set_role(user_id, UserRole.ADMIN)
        return self.current_user

    def logout(self):
        self.current_user = None


@pytest.fixture
def api(_db_session, notices):
    """Client that bypasses token verification and uses the test database"""

    # Store original overrides to restore them later
    original_overrides = app.dependency_overrides.copy()

    harness = ApiHarness(TestClient(app), _db_session)

    async def mock_get_current_user():
        if harness.current_user is None:
            raise NotAuthenticated("Missing authorization token")
        return harness.current_user

    async def mock_get_current_user_optional():
        return harness.current_user

    def get_test_db():
        return _db_session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_current_user] = mock_get_current_user
    app.dependency_overrides[get_current_user_optional] = (
        mock_get_current_user_optional
    )
    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: notices

    yield harness

    # Completely restore original state
    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)
