from __future__ import annotations

from rrs.application.auth import AuthContext
from rrs.application.dto.responses import BookingListResponse, BookingResponse
from rrs.application.errors import BookingNotFoundError, ValidationError
from rrs.application.mappers.booking_mapper import to_booking_list_response, to_booking_response
from rrs.application.ports.repositories import BookingRepository, StoreRepository, TableRepository
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import BookingStatus, Violation
from rrs.domain.common.ids import BookingId, StoreId, TableId

_STATUS_MAP: dict[str, BookingStatus | None] = {
    "ALL": None,
    "PENDING": BookingStatus.PENDING,
    "APPROVED": BookingStatus.APPROVED,
    "DECLINED": BookingStatus.DECLINED,
    "CANCELLED": BookingStatus.CANCELLED,
}


def _parse_status(status: str) -> BookingStatus | None:
    normalized = status.upper()
    if normalized not in _STATUS_MAP:
        raise ValidationError([Violation("status", f"invalid booking status: {status}")])
    return _STATUS_MAP[normalized]


class GetBooking:
    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
    ) -> None:
        self._booking_repository = booking_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(self, booking_id: BookingId, actor: AuthContext) -> BookingResponse:
        booking = self._booking_repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"booking {booking_id} not found")
        self._gate.ensure_can_view_booking(actor, booking)
        return to_booking_response(booking)


class ListMyBookings:
    def __init__(self, booking_repository: BookingRepository) -> None:
        self._booking_repository = booking_repository

    def execute(self, actor: AuthContext) -> BookingListResponse:
        bookings = self._booking_repository.list_for_user(actor.user_id)
        bookings.sort(key=lambda booking: booking.window.start, reverse=True)
        return to_booking_list_response(bookings)


class ListBookings:
    """Owner view of a store's or a table's bookings, earliest first."""

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
    ) -> None:
        self._booking_repository = booking_repository
        self._gate = OwnershipGate(store_repository, table_repository)

    def execute(
        self,
        actor: AuthContext,
        *,
        store_id: StoreId | None = None,
        table_id: TableId | None = None,
        status: str = "ALL",
    ) -> BookingListResponse:
        parsed_status = _parse_status(status)
        if table_id is not None:
            self._gate.ensure_can_manage_table(actor, table_id)
            bookings = self._booking_repository.list_for_table(table_id, status=parsed_status)
        elif store_id is not None:
            self._gate.ensure_can_manage_store(actor, store_id)
            bookings = self._booking_repository.list_for_store(store_id, status=parsed_status)
        else:
            raise ValidationError([Violation("scope", "storeId or tableId is required")])
        return to_booking_list_response(bookings)


class ListPendingBookings:
    """Pending bookings awaiting an owner decision, most recent first."""

    def __init__(
        self,
        store_repository: StoreRepository,
        table_repository: TableRepository,
        booking_repository: BookingRepository,
    ) -> None:
        self._list_bookings = ListBookings(store_repository, table_repository, booking_repository)

    def execute(
        self,
        actor: AuthContext,
        *,
        store_id: StoreId | None = None,
        table_id: TableId | None = None,
    ) -> BookingListResponse:
        payload = self._list_bookings.execute(
            actor,
            store_id=store_id,
            table_id=table_id,
            status="PENDING",
        )
        payload.bookings.sort(key=lambda booking: booking.createdAt, reverse=True)
        return payload
