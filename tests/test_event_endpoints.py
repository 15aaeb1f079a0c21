"""Tests for the /events endpoints"""

import uuid
from datetime import timedelta

import httpx
import pytest

from shiftease.config import config
from shiftease.main import app
from shiftease.services.event_service import utc_today
from shiftease.services.image_service import ImageService, get_image_service


def _event_body(**overrides):
    body = {
        "title": "Park restoration",
        "description": "Planting and mulching",
        "event_date": (utc_today() + timedelta(days=2)).isoformat(),
        "start_time": "10:00",
        "end_time": "13:00",
        "capacity": "2",
        "standby_capacity": "1",
    }
    body.update(overrides)
    return body


def _create(api, **overrides):
    response = api.client.post("/events", json=_event_body(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateEvent:
    def test_admin_creates_event(self, api):
        api.login("admin-1", admin=True)

        data = _create(api)

        assert data["title"] == "Park restoration"
        assert data["capacity"] == 2
        assert data["standby_capacity"] == 1
        assert data["registrations"] == []
        assert data["standby_registrations"] == []

    def test_regular_user_forbidden(self, api):
        api.login("user-1")

        response = api.client.post("/events", json=_event_body())

        assert response.status_code == 403
        assert response.json()["error"] == "admin_required"

    def test_anonymous_rejected(self, api):
        response = api.client.post("/events", json=_event_body())

        assert response.status_code == 401
        assert response.json() == {
            "detail": "Missing authorization token",
            "error": "not_authenticated",
        }

    def test_invalid_time_range(self, api):
        api.login("admin-1", admin=True)

        response = api.client.post(
            "/events", json=_event_body(start_time="14:00", end_time="13:00")
        )

        assert response.status_code == 422

    def test_auto_image_when_enabled(self, api, monkeypatch):
        api.login("admin-1", admin=True)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "photos": [
                        {
                            "photographer": "Dana",
                            "src": {"large": "https://images.example/large.jpg"},
                        }
                    ]
                },
            )

        monkeypatch.setitem(config, "enable_auto_event_image", True)
        app.dependency_overrides[get_image_service] = lambda: ImageService(
            api_key="test-key", transport=httpx.MockTransport(handler)
        )

        data = _create(api)

        assert data["image_url"] == "https://images.example/large.jpg"

    def test_auto_image_failure_is_ignored(self, api, monkeypatch):
        api.login("admin-1", admin=True)

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable")

        monkeypatch.setitem(config, "enable_auto_event_image", True)
        app.dependency_overrides[get_image_service] = lambda: ImageService(
            api_key="test-key", transport=httpx.MockTransport(handler)
        )

        data = _create(api)

        assert data["image_url"] is None


def test_list_upcoming_shows_my_status(api):
    api.login("admin-1", admin=True)
    soon = _create(api, title="Soon", capacity="1", standby_capacity="1")
    later = _create(
        api,
        title="Later",
        event_date=(utc_today() + timedelta(days=9)).isoformat(),
    )
    _create(api, title="Past", event_date=(utc_today() - timedelta(days=1)).isoformat())

    api.login("user-a")
    api.client.post(f"/events/{soon['id']}/registrations")
    api.login("user-b")
    api.client.post(f"/events/{soon['id']}/registrations")

    response = api.client.get("/events")

    assert response.status_code == 200
    events = response.json()
    assert [e["title"] for e in events] == ["Soon", "Later"]
    assert events[0]["my_status"] == "standby"
    assert events[1]["my_status"] is None
    assert events[1]["id"] == later["id"]


def test_archive_is_admin_only(api):
    api.login("admin-1", admin=True)
    _create(api, title="Past", event_date=(utc_today() - timedelta(days=3)).isoformat())

    response = api.client.get("/events/archive")
    assert response.status_code == 200
    assert [e["title"] for e in response.json()] == ["Past"]

    api.login("user-1")
    assert api.client.get("/events/archive").status_code == 403


def test_get_event_and_not_found(api):
    api.login("admin-1", admin=True)
    created = _create(api)
    api.login("user-1")

    assert api.client.get(f"/events/{created['id']}").json()["title"] == "Park restoration"

    response = api.client.get(f"/events/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["error"] == "event_not_found"


def test_edit_event_keeps_registrations(api):
    api.login("admin-1", admin=True)
    created = _create(api, capacity="1", standby_capacity="1")
    api.login("user-a")
    api.client.post(f"/events/{created['id']}/registrations")

    api.login("admin-1")
    response = api.client.patch(
        f"/events/{created['id']}",
        json={"title": "Renamed", "capacity": "5", "registrations": []},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Renamed"
    assert data["capacity"] == 5
    assert [r["user_id"] for r in data["registrations"]] == ["user-a"]


def test_edit_below_count_rejected(api):
    api.login("admin-1", admin=True)
    created = _create(api, capacity="1", standby_capacity="0")
    api.login("user-a")
    api.client.post(f"/events/{created['id']}/registrations")

    api.login("admin-1")
    response = api.client.patch(f"/events/{created['id']}", json={"capacity": 0})

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_delete_event(api):
    api.login("admin-1", admin=True)
    created = _create(api)

    assert api.client.delete(f"/events/{created['id']}").status_code == 204
    assert api.client.get(f"/events/{created['id']}").status_code == 404


def test_delete_all_requires_confirmation(api):
    api.login("admin-1", admin=True)
    _create(api, title="One")
    _create(api, title="Two")

    assert api.client.delete("/events").status_code == 422

    response = api.client.delete("/events", params={"confirm": "true"})
    assert response.status_code == 200
    assert response.json() == {"deleted": 2}
    assert api.client.get("/events").json() == []


def test_create_sample_event(api):
    api.login("admin-1", admin=True)

    response = api.client.post("/events/sample")

    assert response.status_code == 201
    data = response.json()
    assert data["capacity"] == 5
    assert data["standby_capacity"] == 2
    assert data["end_time"] > data["start_time"]
    assert len(data["title"]) <= 25


@pytest.mark.parametrize("method", ["post", "delete"])
def test_sample_and_bulk_delete_admin_only(api, method):
    api.login("user-1")
    path = "/events/sample" if method == "post" else "/events?confirm=true"

    response = getattr(api.client, method)(path)

    assert response.status_code == 403
