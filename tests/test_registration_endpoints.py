"""Tests for registration, roster and attendee endpoints"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from shiftease.main import app
from shiftease.models.user import UserProfileUpdate
from shiftease.services.event_service import utc_today
from shiftease.services.notification_service import (
    RegistrationKind,
    RegistrationNotice,
    get_notification_dispatcher,
)
from shiftease.services.registration_service import RegistrationService
from shiftease.services.user_service import UserService


@pytest.fixture
def event_id(api):
    """Event with one confirmed and one standby slot, created by an admin"""
    api.login("admin-1", admin=True)
    response = api.client.post(
        "/events",
        json={
            "title": "Library reading",
            "description": "Read to kids",
            "event_date": (utc_today() + timedelta(days=4)).isoformat(),
            "start_time": "15:00",
            "end_time": "16:30",
            "capacity": 1,
            "standby_capacity": 1,
        },
    )
    assert response.status_code == 201
    api.logout()
    return response.json()["id"]


def test_register_confirmed_then_standby_then_full(api, event_id):
    api.login("user-a")
    first = api.client.post(f"/events/{event_id}/registrations")
    assert first.status_code == 201
    assert first.json()["status"] == "confirmed"
    assert first.json()["event"]["my_status"] == "confirmed"

    api.login("user-b")
    second = api.client.post(f"/events/{event_id}/registrations")
    assert second.json()["status"] == "standby"

    api.login("user-c")
    third = api.client.post(f"/events/{event_id}/registrations")
    assert third.status_code == 409
    assert third.json()["error"] == "capacity_exceeded"


def test_register_twice_conflicts(api, event_id):
    api.login("user-a")
    api.client.post(f"/events/{event_id}/registrations")

    response = api.client.post(f"/events/{event_id}/registrations")

    assert response.status_code == 409
    assert response.json()["error"] == "already_registered"


def test_admin_cannot_register(api, event_id):
    api.login("admin-1")

    response = api.client.post(f"/events/{event_id}/registrations")

    assert response.status_code == 403
    assert response.json()["error"] == "admin_not_allowed"


def test_anonymous_cannot_register(api, event_id):
    response = api.client.post(f"/events/{event_id}/registrations")

    assert response.status_code == 401


def test_register_unknown_event(api):
    api.login("user-a")

    response = api.client.post(f"/events/{uuid.uuid4()}/registrations")

    assert response.status_code == 404


def test_unregister_promotes_head_of_standby(api, event_id):
    api.login("user-a")
    api.client.post(f"/events/{event_id}/registrations")
    api.login("user-b")
    api.client.post(f"/events/{event_id}/registrations")

    api.login("user-a")
    response = api.client.delete(f"/events/{event_id}/registrations/me")

    assert response.status_code == 200
    data = response.json()
    assert data["removed_from"] == "confirmed"
    assert data["promoted_user_id"] == "user-b"
    assert [r["user_id"] for r in data["event"]["registrations"]] == ["user-b"]
    assert data["event"]["standby_registrations"] == []
    assert data["event"]["my_status"] is None

    again = api.client.delete(f"/events/{event_id}/registrations/me")
    assert again.status_code == 409
    assert again.json()["error"] == "not_registered"


def test_notice_dispatched_after_registration(api, event_id, notices):
    api.login("user-a", email="a@example.com")
    UserService(api.session).upsert_profile(
        "user-a",
        UserProfileUpdate(first_name="Ada", last_name="Lovelace", phone_number="050-1234567"),
    )
    api.client.post(f"/events/{event_id}/registrations")
    api.login("user-b")
    api.client.post(f"/events/{event_id}/registrations")
    api.login("user-c")
    api.client.post(f"/events/{event_id}/registrations")  # full, no notice

    assert len(notices.notices) == 2
    regular, standby = notices.notices
    assert regular.kind == RegistrationKind.REGULAR
    assert regular.user_name == "Ada Lovelace"
    assert regular.user_phone == "050-1234567"
    assert regular.current_capacity == "1/1"
    assert regular.event_title == "Library reading"
    assert regular.event_time == "15:00 - 16:30"
    assert standby.kind == RegistrationKind.STANDBY
    assert standby.user_email == "user-b@example.com"
    assert standby.user_name == "Anonymous User"
    assert standby.current_capacity == "1/1"


def test_roster_and_csv_export(api, event_id):
    UserService(api.session).upsert_profile(
        "user-a", UserProfileUpdate(full_name='Dana "DJ" Levi', email="dana@example.com")
    )
    api.login("user-a")
    api.client.post(f"/events/{event_id}/registrations")
    api.login("user-b")
    api.client.post(f"/events/{event_id}/registrations")

    api.login("admin-1")
    roster = api.client.get(f"/events/{event_id}/registrations")
    assert roster.status_code == 200
    data = roster.json()
    assert [e["name"] for e in data["confirmed"]] == ['Dana "DJ" Levi']
    assert data["confirmed"][0]["email"] == "dana@example.com"
    assert [e["user_id"] for e in data["standby"]] == ["user-b"]

    export = api.client.get(f"/events/{event_id}/registrations.csv")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "Library%20reading.csv" in export.headers["content-disposition"]
    lines = export.text.split("\n")
    assert lines[0] == '"Type","Name","Registered At"'
    assert lines[1].startswith('"Regular","Dana ""DJ"" Levi","')
    # No stored profile and no email
    assert lines[2].startswith('"Standby","N/A","')
    assert len(lines) == 3


def test_roster_admin_only(api, event_id):
    api.login("user-a")

    assert api.client.get(f"/events/{event_id}/registrations").status_code == 403
    assert api.client.get(f"/events/{event_id}/registrations.csv").status_code == 403


def test_attendees_lists_confirmed_only(api, event_id):
    UserService(api.session).upsert_profile(
        "user-a", UserProfileUpdate(first_name="Noa", last_name="Cohen")
    )
    api.login("user-a")
    api.client.post(f"/events/{event_id}/registrations")
    api.login("user-b")
    api.client.post(f"/events/{event_id}/registrations")

    response = api.client.get(f"/events/{event_id}/attendees")

    assert response.status_code == 200
    attendees = response.json()
    assert len(attendees) == 1
    assert attendees[0]["name"] == "Noa Cohen"
    assert attendees[0]["initials"] == "NC"
    assert attendees[0]["avatar_color"].startswith("#")


class FailingDispatcher:
    def dispatch(self, notice, background_tasks):
        raise RuntimeError("notifier is down")


def test_dispatch_failure_keeps_registration(api, event_id):
    app.dependency_overrides[get_notification_dispatcher] = lambda: FailingDispatcher()
    api.login("user-a")

    response = api.client.post(f"/events/{event_id}/registrations")

    assert response.status_code == 201
    assert response.json()["status"] == "confirmed"
    lists = RegistrationService(api.session).get_lists(uuid.UUID(event_id))
    assert [row.user_id for row in lists.confirmed] == ["user-a"]


def test_notice_build_failure_keeps_registration(api, event_id, notices, monkeypatch):
    def broken_from_result(*args, **kwargs):
        raise ValueError("bad profile")

    monkeypatch.setattr(RegistrationNotice, "from_result", broken_from_result)
    api.login("user-a")

    response = api.client.post(f"/events/{event_id}/registrations")

    assert response.status_code == 201
    assert response.json()["event"]["my_status"] == "confirmed"
    assert notices.notices == []


def _database_down(*args, **kwargs):
    raise OperationalError("COMMIT", {}, Exception("server closed the connection"))


def test_commit_failure_returns_503_and_writes_nothing(api, event_id, notices, monkeypatch):
    api.login("user-a")
    monkeypatch.setattr(api.session, "commit", _database_down)

    response = api.client.post(f"/events/{event_id}/registrations")

    assert response.status_code == 503
    assert response.json() == {
        "detail": "Storage backend is unavailable, please try again later",
        "error": "store_unavailable",
    }
    assert notices.notices == []

    monkeypatch.undo()
    lists = RegistrationService(api.session).get_lists(uuid.UUID(event_id))
    assert lists.confirmed == []
    assert lists.standby == []


def test_database_error_outside_services_returns_503(api, event_id, monkeypatch):
    api.login("user-a")
    monkeypatch.setattr(api.session, "exec", _database_down)

    response = api.client.get("/events")

    assert response.status_code == 503
    assert response.json()["error"] == "store_unavailable"
