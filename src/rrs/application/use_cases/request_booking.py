from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from rrs.application.auth import AuthContext
from rrs.application.dto.requests import RequestBookingRequest
from rrs.application.dto.responses import BookingResponse
from rrs.application.errors import (
    ConflictError,
    StoreNotFoundError,
    TableNotFoundError,
    ValidationError,
)
from rrs.application.mappers.booking_mapper import to_booking_response
from rrs.application.metrics.booking_lifecycle import (
    record_booking_conflict,
    record_booking_requested,
)
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import (
    BookingOverlapError,
    BookingRepository,
    StoreRepository,
    TableRepository,
)
from rrs.application.use_cases.availability import AvailabilityOracle, default_duration_minutes
from rrs.application.use_cases.booking_events import mark_table_reserved, publish_booking_event
from rrs.application.use_cases.context import TraceContext
from rrs.domain.booking.entities import (
    BookingDraft,
    BookingStatus,
    CustomerInfo,
    Violation,
    create_pending_booking,
)
from rrs.domain.booking.events import BookingStatusChanged
from rrs.domain.common.ids import BookingId, StoreId, TableId
from rrs.domain.table.entities import Table, TableInactiveError

logger = logging.getLogger(__name__)


class RequestBooking:
    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
        publisher: EventPublisher,
        oracle: AvailabilityOracle | None = None,
    ) -> None:
        self._store_repository = store_repository
        self._table_repository = table_repository
        self._booking_repository = booking_repository
        self._publisher = publisher
        self._oracle = oracle or AvailabilityOracle(booking_repository)

    def execute(
        self,
        request_dto: RequestBookingRequest,
        actor: AuthContext | None,
        trace_ctx: TraceContext,
    ) -> BookingResponse:
        table = self._bookable_table(request_dto)
        store_id = self._bookable_store_id(request_dto, table)

        now = datetime.now(timezone.utc)
        draft = BookingDraft(
            store_id=store_id,
            table_id=table.table_id if table is not None else None,
            user_id=actor.user_id if actor is not None else None,
            customer=CustomerInfo(
                name=request_dto.customer.name,
                email=request_dto.customer.email,
                phone=request_dto.customer.phone,
            ),
            party_size=request_dto.party_size,
            booked_at=request_dto.booked_at,
            duration_minutes=(
                request_dto.duration_minutes
                if request_dto.duration_minutes is not None
                else default_duration_minutes()
            ),
            special_requests=request_dto.special_requests,
        )
        violations = draft.violations(now)
        if table is not None and not table.seats(draft.party_size):
            violations.append(
                Violation("partySize", f"party size exceeds table capacity of {table.capacity}")
            )
        if violations:
            raise ValidationError(violations)

        booking = create_pending_booking(
            booking_id=BookingId(f"bkg_{uuid4().hex[:12]}"),
            draft=draft,
            now=now,
        )

        if table is not None:
            if not self._oracle.is_available(table.table_id, booking.window):
                record_booking_conflict(store_id=str(store_id), stage="precheck")
                raise ConflictError(
                    f"table {table.table_id} is already booked for an overlapping time",
                    details={"tableId": str(table.table_id)},
                )

        try:
            self._booking_repository.add(booking)
        except BookingOverlapError as exc:
            record_booking_conflict(store_id=str(store_id), stage="insert")
            raise ConflictError(
                f"table {booking.table_id} is already booked for an overlapping time",
                details={"tableId": str(booking.table_id)},
            ) from exc

        record_booking_requested(store_id=str(store_id))
        logger.info(
            "booking_requested",
            extra={
                "booking_id": str(booking.booking_id),
                "table_id": str(booking.table_id) if booking.table_id else None,
                "store_id": str(store_id),
            },
        )

        if table is not None:
            mark_table_reserved(self._table_repository, self._publisher, table, now, trace_ctx)

        publish_booking_event(
            self._publisher,
            BookingStatusChanged(
                booking_id=booking.booking_id,
                store_id=booking.store_id,
                table_id=booking.table_id,
                from_status=None,
                to_status=BookingStatus.PENDING,
                actor_id=booking.user_id,
                occurred_at=now,
            ),
            booking,
            trace_ctx,
        )
        return to_booking_response(booking)

    def _bookable_table(self, request_dto: RequestBookingRequest) -> Table | None:
        if request_dto.table_id is None:
            if request_dto.store_id is None:
                raise ValidationError([Violation("tableId", "tableId or storeId is required")])
            return None

        table = self._table_repository.get(TableId(request_dto.table_id))
        if table is None:
            raise TableNotFoundError(f"table {request_dto.table_id} not found")
        try:
            table.ensure_bookable()
        except TableInactiveError as exc:
            raise TableNotFoundError(str(exc)) from exc
        if request_dto.store_id is not None and request_dto.store_id != str(table.store_id):
            raise TableNotFoundError(
                f"table {request_dto.table_id} not found in store {request_dto.store_id}"
            )
        return table

    def _bookable_store_id(self, request_dto: RequestBookingRequest, table: Table | None) -> StoreId:
        store_id = table.store_id if table is not None else StoreId(str(request_dto.store_id))
        store = self._store_repository.get(store_id)
        if store is None or not store.is_active:
            raise StoreNotFoundError(f"store {store_id} not found")
        return store_id
