from __future__ import annotations

from fastapi import Depends

from rrs.api.middleware.request_id import get_request_id
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import (
    BookingRepository,
    StoreRepository,
    TableRepository,
)
from rrs.application.use_cases.approve_booking import ApproveBooking
from rrs.application.use_cases.assign_table import AssignTable
from rrs.application.use_cases.availability import AvailabilityOracle, ListAvailableTables
from rrs.application.use_cases.booking_queries import (
    GetBooking,
    ListBookings,
    ListMyBookings,
    ListPendingBookings,
)
from rrs.application.use_cases.bulk_approve import BulkApprove
from rrs.application.use_cases.cancel_booking import CancelBooking
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.decline_booking import DeclineBooking
from rrs.application.use_cases.delete_booking import DeleteBooking
from rrs.application.use_cases.delete_table import DeleteTable
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.application.use_cases.request_booking import RequestBooking
from rrs.application.use_cases.table_registry import (
    CreateTable,
    GetTable,
    ListTables,
    SetTableStatus,
    UpdateTable,
)
from rrs.infrastructure.db.repositories.booking_repo import SqlAlchemyBookingRepository
from rrs.infrastructure.db.repositories.store_repo import SqlAlchemyStoreRepository
from rrs.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from rrs.infrastructure.messaging.redis_publisher import RedisEventPublisher
from rrs.infrastructure.observability.otel import current_trace_id


def store_repository() -> StoreRepository:
    return SqlAlchemyStoreRepository()


def table_repository() -> TableRepository:
    return SqlAlchemyTableRepository()


def booking_repository() -> BookingRepository:
    return SqlAlchemyBookingRepository()


def event_publisher() -> EventPublisher:
    return RedisEventPublisher()


def trace_context() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def request_booking_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> RequestBooking:
    return RequestBooking(
        store_repository=stores,
        table_repository=tables,
        booking_repository=bookings,
        publisher=publisher,
    )


def approve_booking_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> ApproveBooking:
    return ApproveBooking(stores, tables, bookings, publisher)


def decline_booking_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> DeclineBooking:
    return DeclineBooking(stores, tables, bookings, publisher)


def cancel_booking_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> CancelBooking:
    return CancelBooking(stores, tables, bookings, publisher)


def bulk_approve_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> BulkApprove:
    return BulkApprove(stores, tables, bookings, publisher)


def assign_table_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> AssignTable:
    return AssignTable(stores, tables, bookings, publisher)


def get_booking_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
) -> GetBooking:
    return GetBooking(stores, tables, bookings)


def list_my_bookings_use_case(
    bookings: BookingRepository = Depends(booking_repository),
) -> ListMyBookings:
    return ListMyBookings(bookings)


def list_bookings_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
) -> ListBookings:
    return ListBookings(stores, tables, bookings)


def list_pending_bookings_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
) -> ListPendingBookings:
    return ListPendingBookings(stores, tables, bookings)


def delete_booking_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
) -> DeleteBooking:
    return DeleteBooking(stores, tables, bookings)


def create_table_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
) -> CreateTable:
    return CreateTable(stores, tables)


def get_table_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
) -> GetTable:
    return GetTable(stores, tables)


def list_tables_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
) -> ListTables:
    return ListTables(stores, tables)


def list_available_tables_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
) -> ListAvailableTables:
    return ListAvailableTables(
        table_repository=tables,
        oracle=AvailabilityOracle(bookings),
        gate=OwnershipGate(stores, tables),
    )


def update_table_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
) -> UpdateTable:
    return UpdateTable(stores, tables)


def set_table_status_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    publisher: EventPublisher = Depends(event_publisher),
) -> SetTableStatus:
    return SetTableStatus(stores, tables, publisher)


def delete_table_use_case(
    stores: StoreRepository = Depends(store_repository),
    tables: TableRepository = Depends(table_repository),
    bookings: BookingRepository = Depends(booking_repository),
) -> DeleteTable:
    return DeleteTable(stores, tables, bookings)
