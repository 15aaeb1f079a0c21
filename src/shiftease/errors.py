"""Error taxonomy for ShiftEase.

Every error carries the HTTP status it maps to and a short machine readable
code. Routers let these propagate; the handler registered in ``main``
renders them as ``{"detail": ..., "error": ...}``.
"""

from typing import Optional


class ShiftEaseError(Exception):
    """Base class for all errors surfaced to the caller"""

    status_code = 400
    code = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticated(ShiftEaseError):
    status_code = 401
    code = "not_authenticated"
    default_message = "Please log in to continue"


class AdminNotAllowed(ShiftEaseError):
    status_code = 403
    code = "admin_not_allowed"
    default_message = "Administrators cannot register for events"


class AdminRequired(ShiftEaseError):
    status_code = 403
    code = "admin_required"
    default_message = "Only administrators can perform this action"


class EventNotFound(ShiftEaseError):
    status_code = 404
    code = "event_not_found"
    default_message = "Event not found"


class AlreadyRegistered(ShiftEaseError):
    status_code = 409
    code = "already_registered"
    default_message = "You are already registered for this event"


class NotRegistered(ShiftEaseError):
    status_code = 409
    code = "not_registered"
    default_message = "You are not registered for this event"


class CapacityExceeded(ShiftEaseError):
    status_code = 409
    code = "capacity_exceeded"
    default_message = "Event is full, including the standby list"


class ValidationError(ShiftEaseError):
    status_code = 422
    code = "validation_error"
    default_message = "Invalid input"


class StoreUnavailable(ShiftEaseError):
    status_code = 503
    code = "store_unavailable"
    default_message = "Storage backend is unavailable, please try again later"
