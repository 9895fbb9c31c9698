"""Error taxonomy shared by the favorites store, token cache and upstream clients."""

from __future__ import annotations


class EventFinderError(Exception):
    """Base class for errors raised by the event finder services."""


class ValidationError(EventFinderError):
    """A required field or parameter is missing or malformed."""


class AlreadyExistsError(EventFinderError):
    """A favorite with the same event id is already stored."""

    def __init__(self, event_id: str):
        super().__init__(f"Event {event_id!r} is already in favorites")
        self.event_id = event_id


class NotFoundError(EventFinderError):
    """The requested record does not exist."""


class AuthError(EventFinderError):
    """Fetching a bearer token from a partner API failed."""


class UpstreamError(EventFinderError):
    """A third-party API call failed."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "AlreadyExistsError",
    "AuthError",
    "EventFinderError",
    "NotFoundError",
    "UpstreamError",
    "ValidationError",
]
