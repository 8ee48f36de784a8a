"""
Typed errors for availability and booking operations.

Each error carries the HTTP-equivalent status it maps to, so the API
layer can translate it without knowing which operation raised it.
"""

from typing import Any, Optional


class BookingError(Exception):
    """Base class for every error surfaced by the booking engine."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


class ValidationError(BookingError):
    """Malformed or unacceptable input. Fix the request; never retried."""

    http_status = 422


class InvalidAvailabilityError(ValidationError):
    """A weekly open-hours document failed validation on write."""


class NotFoundError(ValidationError):
    """The referenced appointment does not exist."""

    http_status = 404


class ConflictError(BookingError):
    """The requested instant was taken between display and commit."""

    http_status = 409


class StateError(BookingError):
    """The requested lifecycle transition is not allowed."""

    http_status = 409


class ForbiddenError(BookingError):
    """The acting role may not perform this operation."""

    http_status = 403


class AvailabilityIntegrityError(BookingError):
    """Stored weekly hours are malformed. A data fault, not a user error."""

    http_status = 500
