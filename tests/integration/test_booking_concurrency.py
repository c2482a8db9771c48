from __future__ import annotations

import concurrent.futures
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rrs.application.dto.requests import CustomerRequest, RequestBookingRequest
from rrs.application.errors import ConflictError
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.request_booking import RequestBooking
from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import TableId
from rrs.infrastructure.db.repositories.booking_repo import SqlAlchemyBookingRepository
from rrs.infrastructure.db.repositories.store_repo import SqlAlchemyStoreRepository
from rrs.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from rrs.infrastructure.messaging.redis_publisher import RedisEventPublisher


def test_concurrent_requests_for_one_window_admit_a_single_booking() -> None:
    day = datetime.now(timezone.utc).date() + timedelta(days=2)
    starts = [
        datetime(day.year, day.month, day.day, 19, minute, tzinfo=timezone.utc)
        for minute in (0, 10, 20, 30, 40, 50)
    ]
    use_case = RequestBooking(
        store_repository=SqlAlchemyStoreRepository(),
        table_repository=SqlAlchemyTableRepository(),
        booking_repository=SqlAlchemyBookingRepository(),
        publisher=RedisEventPublisher(),
    )

    def _request(start: datetime) -> str:
        request_dto = RequestBookingRequest(
            table_id="tbl_002",
            booked_at=start,
            duration_minutes=90,
            customer=CustomerRequest(name="Racer"),
            party_size=2,
        )
        try:
            use_case.execute(
                request_dto=request_dto,
                actor=None,
                trace_ctx=TraceContext(trace_id=None, request_id=None),
            )
            return "CREATED"
        except ConflictError:
            return "CONFLICT"

    with concurrent.futures.ThreadPoolExecutor(max_workers=len(starts)) as executor:
        results = list(executor.map(_request, starts))

    assert results.count("CREATED") == 1
    assert results.count("CONFLICT") == len(starts) - 1

    active = SqlAlchemyBookingRepository().list_for_table(
        TableId("tbl_002"),
        status=BookingStatus.PENDING,
    )
    assert len(active) == 1
