"""Database models for ShiftEase"""

from shiftease.models.event import Event
from shiftease.models.feedback import Feedback
from shiftease.models.registration import Registration
from shiftease.models.user import User, UserRole

__all__ = [
    "Event",
    "Registration",
    "User",
    "UserRole",
    "Feedback",
]
