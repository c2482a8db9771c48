from __future__ import annotations

import logging
from datetime import datetime, timezone

from rrs.application.auth import AuthContext
from rrs.application.dto.responses import BookingResponse
from rrs.application.errors import (
    BookingNotFoundError,
    ConflictError,
    InvalidBookingTransitionError,
    TableNotFoundError,
    ValidationError,
)
from rrs.application.mappers.booking_mapper import to_booking_response
from rrs.application.metrics.booking_lifecycle import record_booking_conflict
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import (
    BookingOverlapError,
    BookingRepository,
    StaleBookingStatusError,
    StoreRepository,
    TableRepository,
)
from rrs.application.use_cases.availability import AvailabilityOracle
from rrs.application.use_cases.booking_events import mark_table_reserved
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import ACTIVE_STATUSES, Violation
from rrs.domain.common.ids import BookingId, TableId

logger = logging.getLogger(__name__)


class AssignTable:
    """Bind a table to a booking that was submitted without one."""

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
        publisher: EventPublisher,
        oracle: AvailabilityOracle | None = None,
    ) -> None:
        self._table_repository = table_repository
        self._booking_repository = booking_repository
        self._publisher = publisher
        self._gate = OwnershipGate(store_repository, table_repository)
        self._oracle = oracle or AvailabilityOracle(booking_repository)

    def execute(
        self,
        booking_id: BookingId,
        table_id: TableId,
        actor: AuthContext,
        trace_ctx: TraceContext,
    ) -> BookingResponse:
        booking = self._booking_repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"booking {booking_id} not found")
        self._gate.ensure_can_manage_booking(actor, booking)

        if not booking.status.is_active:
            raise InvalidBookingTransitionError(
                f"cannot assign a table to a {booking.status.value} booking",
                details={"status": booking.status.value},
            )
        if booking.table_id is not None:
            raise InvalidBookingTransitionError(
                f"booking {booking_id} is already assigned to table {booking.table_id}",
                details={"tableId": str(booking.table_id)},
            )

        table = self._table_repository.get(table_id)
        if table is None or not table.is_active or table.store_id != booking.store_id:
            raise TableNotFoundError(f"table {table_id} not found in store {booking.store_id}")
        if not table.seats(booking.party_size):
            raise ValidationError(
                [Violation("partySize", f"party size exceeds table capacity of {table.capacity}")]
            )

        if not self._oracle.is_available(table_id, booking.window):
            record_booking_conflict(store_id=str(booking.store_id), stage="precheck")
            raise ConflictError(
                f"table {table_id} is already booked for an overlapping time",
                details={"tableId": str(table_id)},
            )

        now = datetime.now(timezone.utc)
        try:
            updated = self._booking_repository.assign_table(
                booking_id=booking_id,
                table_id=table_id,
                expected_statuses=ACTIVE_STATUSES,
                now=now,
            )
        except BookingOverlapError as exc:
            record_booking_conflict(store_id=str(booking.store_id), stage="insert")
            raise ConflictError(
                f"table {table_id} is already booked for an overlapping time",
                details={"tableId": str(table_id)},
            ) from exc
        except StaleBookingStatusError as exc:
            raise InvalidBookingTransitionError(
                f"booking {booking_id} changed while assigning a table"
            ) from exc

        logger.info(
            "booking_table_assigned",
            extra={"booking_id": str(booking_id), "table_id": str(table_id)},
        )
        mark_table_reserved(self._table_repository, self._publisher, table, now, trace_ctx)
        return to_booking_response(updated)
