from __future__ import annotations

import logging
from datetime import datetime, timezone

from rrs.application.auth import AuthContext
from rrs.application.errors import BookingNotFoundError, InvalidBookingTransitionError
from rrs.application.metrics.booking_lifecycle import record_transition
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import (
    BookingRepository,
    StaleBookingStatusError,
    StoreRepository,
    TableRepository,
)
from rrs.application.use_cases.booking_events import publish_booking_event
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import Booking, BookingStatus, allowed_sources
from rrs.domain.booking.events import BookingStatusChanged
from rrs.domain.common.ids import BookingId

logger = logging.getLogger(__name__)


class BookingTransition:
    """Shared path for single-booking status changes.

    The write is conditional on the status the booking may legally move
    from, so two racing actors cannot both apply the same change.
    """

    target: BookingStatus

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
        publisher: EventPublisher,
    ) -> None:
        self._table_repository = table_repository
        self._booking_repository = booking_repository
        self._publisher = publisher
        self._gate = OwnershipGate(store_repository, table_repository)

    def _load(self, booking_id: BookingId) -> Booking:
        booking = self._booking_repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"booking {booking_id} not found")
        return booking

    def _apply(
        self,
        booking: Booking,
        actor: AuthContext,
        trace_ctx: TraceContext,
        *,
        accept_code: str | None = None,
        decline_reason: str | None = None,
    ) -> tuple[Booking, bool]:
        """Return the persisted booking and whether this call changed it."""
        if booking.status == self.target:
            return booking, False
        sources = allowed_sources(self.target)
        if booking.status not in sources:
            raise InvalidBookingTransitionError(
                f"cannot move booking from status={booking.status.value} "
                f"to status={self.target.value}",
                details={"status": booking.status.value},
            )

        now = datetime.now(timezone.utc)
        try:
            updated = self._booking_repository.update_status(
                booking_id=booking.booking_id,
                new_status=self.target,
                expected_statuses=sources,
                now=now,
                accept_code=accept_code,
                decline_reason=decline_reason,
            )
        except StaleBookingStatusError:
            current = self._load(booking.booking_id)
            if current.status == self.target:
                return current, False
            raise InvalidBookingTransitionError(
                f"cannot move booking from status={current.status.value} "
                f"to status={self.target.value}",
                details={"status": current.status.value},
            )

        record_transition(from_status=booking.status, to_status=self.target)
        logger.info(
            "booking_status_changed",
            extra={
                "booking_id": str(updated.booking_id),
                "table_id": str(updated.table_id) if updated.table_id else None,
                "status": updated.status.value,
            },
        )
        publish_booking_event(
            self._publisher,
            BookingStatusChanged(
                booking_id=updated.booking_id,
                store_id=updated.store_id,
                table_id=updated.table_id,
                from_status=booking.status,
                to_status=self.target,
                actor_id=actor.user_id,
                occurred_at=now,
            ),
            updated,
            trace_ctx,
        )
        return updated, True
