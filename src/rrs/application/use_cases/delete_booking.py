from __future__ import annotations

import logging

from rrs.application.auth import AuthContext
from rrs.application.errors import BookingNotFoundError, InvalidBookingTransitionError
from rrs.application.ports.repositories import BookingRepository, StoreRepository, TableRepository
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.common.ids import BookingId

logger = logging.getLogger(__name__)


class DeleteBooking:
    """Hard delete of a finished booking. Active bookings must be cancelled
    or declined first so no live reservation disappears silently."""

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
    ) -> None:
        self._booking_repository = booking_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(self, booking_id: BookingId, actor: AuthContext) -> None:
        booking = self._booking_repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"booking {booking_id} not found")
        self._gate.ensure_can_manage_booking(actor, booking)
        if not booking.status.is_terminal:
            raise InvalidBookingTransitionError(
                f"cannot delete a {booking.status.value} booking",
                details={"status": booking.status.value},
            )
        self._booking_repository.delete(booking_id)
        logger.info("booking_deleted", extra={"booking_id": str(booking_id)})
