from __future__ import annotations

from typing import Any

from rrs.domain.booking.entities import Violation


class ReservationError(Exception):
    """Base of every error surfaced to callers; ``code`` is stable across releases."""

    code = "RESERVATION_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class ValidationError(ReservationError):
    code = "VALIDATION_FAILED"

    def __init__(self, violations: list[Violation]) -> None:
        super().__init__(
            "; ".join(f"{v.field}: {v.message}" for v in violations) or "invalid request",
            details={"violations": [{"field": v.field, "message": v.message} for v in violations]},
        )
        self.violations = violations


class InvalidTableStatusError(ValidationError):
    code = "INVALID_TABLE_STATUS"


class NotFoundError(ReservationError):
    code = "NOT_FOUND"


class StoreNotFoundError(NotFoundError):
    code = "STORE_NOT_FOUND"


class TableNotFoundError(NotFoundError):
    code = "TABLE_NOT_FOUND"


class BookingNotFoundError(NotFoundError):
    code = "BOOKING_NOT_FOUND"


class ConflictError(ReservationError):
    """The requested window overlaps an active booking; expected, not a bug."""

    code = "TIME_SLOT_TAKEN"


class InvalidBookingTransitionError(ReservationError):
    code = "INVALID_BOOKING_TRANSITION"


class ForbiddenError(ReservationError):
    code = "FORBIDDEN"


class UnauthenticatedError(ReservationError):
    code = "UNAUTHENTICATED"


class InfrastructureError(ReservationError):
    code = "INFRASTRUCTURE_ERROR"


class TableDeletionIncompleteError(InfrastructureError):
    code = "TABLE_DELETION_INCOMPLETE"
