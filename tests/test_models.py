"""Tests for table definitions shared with the migrations"""

import pytest

from shiftease.models import Event, Feedback, Registration, User

TIMESTAMP_COLUMNS = [
    (Event, "created_at"),
    (Event, "updated_at"),
    (Registration, "registered_at"),
    (User, "created_at"),
    (User, "updated_at"),
    (Feedback, "created_at"),
]


@pytest.mark.parametrize("model, column", TIMESTAMP_COLUMNS)
def test_timestamps_are_timezone_aware(model, column):
    assert model.__table__.c[column].type.timezone is True


def test_one_registration_per_user_and_event():
    constraints = {
        tuple(sorted(c.name for c in constraint.columns))
        for constraint in Registration.__table__.constraints
        if constraint.__class__.__name__ == "UniqueConstraint"
    }

    assert ("event_id", "user_id") in constraints
