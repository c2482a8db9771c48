from __future__ import annotations

from datetime import datetime
from typing import Protocol

from rrs.domain.booking.entities import Booking, BookingStatus
from rrs.domain.common.ids import BookingId, StoreId, TableId, UserId
from rrs.domain.common.window import TimeWindow
from rrs.domain.store.entities import Store
from rrs.domain.table.entities import Table, TableStatus


class StoreRepository(Protocol):
    def get(self, store_id: StoreId) -> Store | None: ...


class TableRepository(Protocol):
    def add(self, table: Table) -> None: ...

    def get(self, table_id: TableId) -> Table | None: ...

    def list_for_store(self, store_id: StoreId, include_inactive: bool = False) -> list[Table]: ...

    def update(self, table: Table) -> None: ...

    def set_status(self, table_id: TableId, status: TableStatus, now: datetime) -> None: ...

    def delete(self, table_id: TableId) -> None: ...


class BookingRepository(Protocol):
    def add(self, booking: Booking) -> None:
        """Persist a booking, refusing it when its table already has an
        overlapping active booking (raises ``BookingOverlapError``)."""
        ...

    def get(self, booking_id: BookingId) -> Booking | None: ...

    def list_active_overlapping(
        self,
        table_id: TableId,
        window: TimeWindow,
        timeout_seconds: float,
    ) -> list[Booking]: ...

    def list_active_for_tables(
        self,
        table_ids: list[TableId],
        window: TimeWindow,
        timeout_seconds: float,
    ) -> list[Booking]: ...

    def list_for_table(self, table_id: TableId, status: BookingStatus | None = None) -> list[Booking]: ...

    def list_for_store(self, store_id: StoreId, status: BookingStatus | None = None) -> list[Booking]: ...

    def list_for_user(self, user_id: UserId) -> list[Booking]: ...

    def update_status(
        self,
        booking_id: BookingId,
        new_status: BookingStatus,
        expected_statuses: frozenset[BookingStatus],
        now: datetime,
        *,
        accept_code: str | None = None,
        decline_reason: str | None = None,
    ) -> Booking: ...

    def approve_pending(
        self,
        *,
        store_id: StoreId | None,
        table_id: TableId | None,
        now: datetime,
    ) -> list[Booking]:
        """Conditionally approve every pending booking in scope and return
        only the rows this call moved."""
        ...

    def assign_table(
        self,
        booking_id: BookingId,
        table_id: TableId,
        expected_statuses: frozenset[BookingStatus],
        now: datetime,
    ) -> Booking: ...

    def delete(self, booking_id: BookingId) -> None: ...

    def delete_for_table(self, table_id: TableId) -> int: ...


class BookingOverlapError(Exception):
    pass


class StaleBookingStatusError(Exception):
    pass
