from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fakes import (
    OTHER_STORE_ID,
    OWNER_ID,
    STORE_ID,
    STRANGER_ID,
    TRACE,
    FakePublisher,
    FakeStoreRepository,
    FakeTableRepository,
    InMemoryBookingRepository,
    make_booking,
    make_store,
    make_table,
    tomorrow_at,
)
from rrs.application.auth import AuthContext
from rrs.application.errors import ForbiddenError, ValidationError
from rrs.application.use_cases.bulk_approve import BulkApprove
from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import BookingId, TableId

OWNER = AuthContext(user_id=OWNER_ID)


def _bookings() -> InMemoryBookingRepository:
    return InMemoryBookingRepository(
        [
            make_booking("bkg_001", table_id="tbl_001", start=tomorrow_at(12)),
            make_booking("bkg_002", table_id="tbl_001", start=tomorrow_at(15)),
            make_booking("bkg_003", table_id="tbl_002", start=tomorrow_at(19)),
            make_booking(
                "bkg_004",
                table_id="tbl_002",
                start=tomorrow_at(12),
                status=BookingStatus.APPROVED,
            ),
            make_booking("bkg_005", table_id=None, store_id=OTHER_STORE_ID),
        ]
    )


def _use_case(bookings: InMemoryBookingRepository, publisher: FakePublisher | None = None):
    return BulkApprove(
        store_repository=FakeStoreRepository(
            [make_store(), make_store(OTHER_STORE_ID, owner_id=STRANGER_ID)]
        ),
        table_repository=FakeTableRepository([make_table("tbl_001"), make_table("tbl_002")]),
        booking_repository=bookings,
        publisher=publisher or FakePublisher(),
    )


def test_store_scope_approves_only_pending_bookings() -> None:
    bookings = _bookings()
    approved_before = bookings.get(BookingId("bkg_004"))
    publisher = FakePublisher()

    response = _use_case(bookings, publisher).execute(OWNER, TRACE, store_id=STORE_ID)

    assert response.approvedCount == 3
    assert sorted(response.approvedIds) == ["bkg_001", "bkg_002", "bkg_003"]
    assert bookings.get(BookingId("bkg_004")) == approved_before
    assert bookings.get(BookingId("bkg_005")).status == BookingStatus.PENDING
    assert len(publisher.messages) == 3
    assert all(bookings.get(BookingId(i)).accept_code for i in response.approvedIds)


def test_table_scope() -> None:
    bookings = _bookings()

    response = _use_case(bookings).execute(OWNER, TRACE, table_id=TableId("tbl_001"))

    assert sorted(response.approvedIds) == ["bkg_001", "bkg_002"]
    assert bookings.get(BookingId("bkg_003")).status == BookingStatus.PENDING


def test_second_run_approves_nothing() -> None:
    bookings = _bookings()
    use_case = _use_case(bookings)

    use_case.execute(OWNER, TRACE, store_id=STORE_ID)
    again = use_case.execute(OWNER, TRACE, store_id=STORE_ID)

    assert again.approvedCount == 0
    assert again.approvedIds == []


def test_concurrent_bulk_approvals_never_share_a_row() -> None:
    bookings = _bookings()
    use_case = _use_case(bookings)
    results = []
    barrier = threading.Barrier(4)

    def _run() -> None:
        barrier.wait()
        results.append(use_case.execute(OWNER, TRACE, store_id=STORE_ID))

    threads = [threading.Thread(target=_run) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    all_ids = [booking_id for result in results for booking_id in result.approvedIds]
    assert sorted(all_ids) == ["bkg_001", "bkg_002", "bkg_003"]


def test_scope_must_be_exactly_one() -> None:
    use_case = _use_case(_bookings())

    with pytest.raises(ValidationError):
        use_case.execute(OWNER, TRACE)
    with pytest.raises(ValidationError):
        use_case.execute(OWNER, TRACE, store_id=STORE_ID, table_id=TableId("tbl_001"))


def test_other_owner_is_forbidden() -> None:
    bookings = _bookings()

    with pytest.raises(ForbiddenError):
        _use_case(bookings).execute(AuthContext(user_id=STRANGER_ID), TRACE, store_id=STORE_ID)

    assert bookings.get(BookingId("bkg_001")).status == BookingStatus.PENDING
