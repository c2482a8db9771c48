from __future__ import annotations

import sys
import time
from datetime import timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fakes import (
    STORE_ID,
    FakeStoreRepository,
    FakeTableRepository,
    InMemoryBookingRepository,
    make_booking,
    make_store,
    make_table,
    tomorrow_at,
)
from rrs.application.errors import StoreNotFoundError, ValidationError
from rrs.application.use_cases.availability import AvailabilityOracle, ListAvailableTables
from rrs.application.use_cases.ownership import OwnershipGate
from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import StoreId, TableId
from rrs.domain.common.window import TimeWindow

TABLE = TableId("tbl_001")


class SlowBookingRepository(InMemoryBookingRepository):
    def list_active_overlapping(self, table_id, window, timeout_seconds):
        time.sleep(0.05)
        return []

    def list_active_for_tables(self, table_ids, window, timeout_seconds):
        time.sleep(0.05)
        return []


class BrokenBookingRepository(InMemoryBookingRepository):
    def list_active_overlapping(self, table_id, window, timeout_seconds):
        raise ConnectionError("database unreachable")

    def list_active_for_tables(self, table_ids, window, timeout_seconds):
        raise ConnectionError("database unreachable")


def test_free_table_is_available() -> None:
    oracle = AvailabilityOracle(InMemoryBookingRepository())
    assert oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(19)))


def test_overlap_is_unavailable_but_touching_is_available() -> None:
    oracle = AvailabilityOracle(InMemoryBookingRepository([make_booking(start=tomorrow_at(19))]))

    assert not oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(20)))
    assert not oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(18), duration_minutes=61))
    assert oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(21)))
    assert oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(17)))


@pytest.mark.parametrize("status", [BookingStatus.DECLINED, BookingStatus.CANCELLED])
def test_terminal_bookings_do_not_block(status: BookingStatus) -> None:
    oracle = AvailabilityOracle(InMemoryBookingRepository([make_booking(status=status)]))
    assert oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(19)))


def test_lookup_error_fails_closed() -> None:
    oracle = AvailabilityOracle(BrokenBookingRepository())

    assert not oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(19)))
    assert oracle.busy_table_ids([TABLE, TableId("tbl_002")], TimeWindow(start=tomorrow_at(19))) is None


def test_slow_lookup_fails_closed() -> None:
    oracle = AvailabilityOracle(SlowBookingRepository(), timeout_seconds=0.01)
    assert not oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(19)))


def test_timeout_comes_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("AVAILABILITY_TIMEOUT_SECONDS", "0.01")
    oracle = AvailabilityOracle(SlowBookingRepository())
    assert not oracle.is_available(TABLE, TimeWindow(start=tomorrow_at(19)))


def _list_available(
    bookings: InMemoryBookingRepository,
    stores: FakeStoreRepository | None = None,
) -> ListAvailableTables:
    tables = FakeTableRepository(
        [
            make_table("tbl_001", capacity=2, name="A"),
            make_table("tbl_002", capacity=4, name="B"),
            make_table("tbl_003", capacity=6, name="C"),
            make_table("tbl_004", capacity=6, name="D", is_active=False),
        ]
    )
    return ListAvailableTables(
        table_repository=tables,
        oracle=AvailabilityOracle(bookings),
        gate=OwnershipGate(stores or FakeStoreRepository(), tables),
    )


def test_list_available_excludes_busy_and_inactive_tables() -> None:
    bookings = InMemoryBookingRepository(
        [make_booking(table_id="tbl_002", start=tomorrow_at(19))]
    )

    response = _list_available(bookings).execute(STORE_ID, at=tomorrow_at(20), duration_minutes=60)

    assert [table.tableId for table in response.tables] == ["tbl_001", "tbl_003"]


def test_list_available_filters_by_party_size() -> None:
    response = _list_available(InMemoryBookingRepository()).execute(
        STORE_ID,
        at=tomorrow_at(20),
        party_size=3,
    )

    assert [table.tableId for table in response.tables] == ["tbl_002", "tbl_003"]


def test_list_available_returns_nothing_when_lookup_fails() -> None:
    response = _list_available(BrokenBookingRepository()).execute(STORE_ID, at=tomorrow_at(20))
    assert response.tables == []


def test_list_available_validation() -> None:
    use_case = _list_available(InMemoryBookingRepository())

    with pytest.raises(ValidationError):
        use_case.execute(STORE_ID, at=tomorrow_at(20), duration_minutes=0)
    with pytest.raises(StoreNotFoundError):
        use_case.execute(StoreId("str_missing"), at=tomorrow_at(20) + timedelta(days=1))


def test_list_available_rejects_durations_beyond_a_day() -> None:
    use_case = _list_available(InMemoryBookingRepository())

    with pytest.raises(ValidationError) as exc_info:
        use_case.execute(STORE_ID, at=tomorrow_at(20), duration_minutes=10**10)

    assert exc_info.value.violations[0].field == "durationMinutes"
    full_day = use_case.execute(STORE_ID, at=tomorrow_at(20), duration_minutes=24 * 60)
    assert len(full_day.tables) == 3


def test_list_available_hides_inactive_store() -> None:
    use_case = _list_available(
        InMemoryBookingRepository(),
        stores=FakeStoreRepository([make_store(is_active=False)]),
    )

    with pytest.raises(StoreNotFoundError):
        use_case.execute(STORE_ID, at=tomorrow_at(20))
