from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rrs.api.main import app
from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import BookingId, TableId
from rrs.infrastructure.db.repositories.booking_repo import SqlAlchemyBookingRepository
from rrs.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

DEMO_OWNER_HEADERS = {"X-User-Id": "usr_owner_001"}


def _tomorrow_at(hour: int) -> datetime:
    day = datetime.now(timezone.utc).date() + timedelta(days=1)
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


def _request(client: TestClient, hour: int, table_id: str = "tbl_002"):
    return client.post(
        "/v1/bookings",
        json={
            "tableId": table_id,
            "bookedAt": _tomorrow_at(hour).isoformat(),
            "durationMinutes": 120,
            "customer": {"name": "Ana", "email": "ana@example.com"},
            "partySize": 2,
        },
        headers={"X-User-Id": "usr_customer_001"},
    )


def test_request_approve_and_cancel_persists_lifecycle() -> None:
    with TestClient(app) as client:
        created = _request(client, 19)
        assert created.status_code == 201
        booking_id = created.json()["bookingId"]

        assert _request(client, 20).status_code == 409
        assert _request(client, 21).status_code == 201

        approved = client.post(f"/v1/bookings/{booking_id}/approve", headers=DEMO_OWNER_HEADERS)
        assert approved.status_code == 200
        assert approved.json()["approved"] is True

        cancelled = client.post(
            f"/v1/bookings/{booking_id}/cancel",
            headers={"X-User-Id": "usr_customer_001"},
        )
        assert cancelled.status_code == 200

    stored = SqlAlchemyBookingRepository().get(BookingId(booking_id))
    assert stored is not None
    assert stored.status == BookingStatus.CANCELLED
    assert stored.accept_code is not None


def test_available_tables_exclude_booked_table() -> None:
    with TestClient(app) as client:
        assert _request(client, 19).status_code == 201

        response = client.get(
            "/v1/stores/str_001/tables/available",
            params={"at": _tomorrow_at(20).isoformat(), "durationMinutes": 60, "partySize": 2},
        )

    assert response.status_code == 200
    table_ids = [table["tableId"] for table in response.json()["tables"]]
    assert "tbl_002" not in table_ids
    assert "tbl_001" in table_ids


def test_request_marks_table_reserved_and_decline_releases_it() -> None:
    tables = SqlAlchemyTableRepository()
    with TestClient(app) as client:
        created = _request(client, 18, table_id="tbl_003")
        assert created.status_code == 201
        reserved = tables.get(TableId("tbl_003"))
        assert reserved is not None
        assert reserved.status.value == "reserved"

        declined = client.post(
            f"/v1/bookings/{created.json()['bookingId']}/decline",
            json={"reason": "Private event"},
            headers=DEMO_OWNER_HEADERS,
        )
        assert declined.status_code == 200

    released = tables.get(TableId("tbl_003"))
    assert released is not None
    assert released.status.value == "available"


def test_bulk_approve_moves_every_pending_booking() -> None:
    with TestClient(app) as client:
        for hour, table_id in ((12, "tbl_001"), (14, "tbl_001"), (19, "tbl_004")):
            assert _request(client, hour, table_id=table_id).status_code == 201

        response = client.post(
            "/v1/stores/str_001/bookings/approve-pending",
            headers=DEMO_OWNER_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["approvedCount"] == 3

        pending = client.get("/v1/stores/str_001/bookings/pending", headers=DEMO_OWNER_HEADERS)
        assert pending.json()["bookings"] == []

        approved = client.get(
            "/v1/stores/str_001/bookings",
            params={"status": "approved"},
            headers=DEMO_OWNER_HEADERS,
        )
        codes = [booking["acceptCode"] for booking in approved.json()["bookings"]]
        assert len(codes) == 3
        assert all(codes)
