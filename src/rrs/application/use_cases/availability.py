from __future__ import annotations

import logging
import os
import time
from datetime import datetime

from rrs.application.dto.responses import TableListResponse
from rrs.application.errors import StoreNotFoundError, ValidationError
from rrs.application.mappers.table_mapper import to_table_list_response
from rrs.application.metrics.booking_lifecycle import record_availability_check_failure
from rrs.application.ports.repositories import BookingRepository, TableRepository
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import Violation
from rrs.domain.common.ids import StoreId, TableId
from rrs.domain.common.window import MAX_DURATION_MINUTES, TimeWindow

logger = logging.getLogger(__name__)


def _availability_timeout_seconds() -> float:
    return float(os.getenv("AVAILABILITY_TIMEOUT_SECONDS", "2.0"))


def default_duration_minutes() -> int:
    return int(os.getenv("BOOKING_DEFAULT_DURATION_MINUTES", "120"))


class AvailabilityOracle:
    """Authoritative answer to "is this table free for this window?".

    Any lookup failure or an answer slower than the timeout counts as
    unavailable.
    """

    def __init__(
        self,
        booking_repository: BookingRepository,
        timeout_seconds: float | None = None,
    ) -> None:
        self._booking_repository = booking_repository
        self._timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else _availability_timeout_seconds()
        )

    def is_available(self, table_id: TableId, window: TimeWindow) -> bool:
        busy = self.busy_table_ids([table_id], window)
        return busy is not None and table_id not in busy

    def busy_table_ids(self, table_ids: list[TableId], window: TimeWindow) -> set[TableId] | None:
        """Tables with an overlapping active booking, or ``None`` when the
        lookup could not be trusted."""
        if not table_ids:
            return set()

        started = time.perf_counter()
        try:
            if len(table_ids) == 1:
                bookings = self._booking_repository.list_active_overlapping(
                    table_id=table_ids[0],
                    window=window,
                    timeout_seconds=self._timeout_seconds,
                )
            else:
                bookings = self._booking_repository.list_active_for_tables(
                    table_ids=table_ids,
                    window=window,
                    timeout_seconds=self._timeout_seconds,
                )
        except Exception:
            record_availability_check_failure(reason="error")
            logger.exception(
                "availability_check_failed",
                extra={"table_ids": [str(table_id) for table_id in table_ids]},
            )
            return None

        elapsed = time.perf_counter() - started
        if elapsed > self._timeout_seconds:
            record_availability_check_failure(reason="timeout")
            logger.warning(
                "availability_check_timeout",
                extra={"duration_ms": round(elapsed * 1000, 2)},
            )
            return None

        return {
            booking.table_id
            for booking in bookings
            if booking.table_id is not None and booking.conflicts_with(window)
        }


class ListAvailableTables:
    def __init__(
        self,
        table_repository: TableRepository,
        oracle: AvailabilityOracle,
        gate: OwnershipGate,
    ) -> None:
        self._table_repository = table_repository
        self._oracle = oracle
        self._gate = gate

    def execute(
        self,
        store_id: StoreId,
        at: datetime,
        duration_minutes: int | None = None,
        party_size: int | None = None,
    ) -> TableListResponse:
        duration = duration_minutes if duration_minutes is not None else default_duration_minutes()
        if not 1 <= duration <= MAX_DURATION_MINUTES:
            raise ValidationError(
                [
                    Violation(
                        "durationMinutes",
                        f"duration must be between 1 and {MAX_DURATION_MINUTES} minutes",
                    )
                ]
            )
        if not self._gate.store(store_id).is_active:
            raise StoreNotFoundError(f"store {store_id} not found")

        window = TimeWindow(start=at, duration_minutes=duration)
        tables = [
            table
            for table in self._table_repository.list_for_store(store_id)
            if table.is_active and (party_size is None or table.seats(party_size))
        ]
        busy = self._oracle.busy_table_ids([table.table_id for table in tables], window)
        if busy is None:
            return to_table_list_response([])
        return to_table_list_response([table for table in tables if table.table_id not in busy])
