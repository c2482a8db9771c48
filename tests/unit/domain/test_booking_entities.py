from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from rrs.domain.booking.entities import (
    BookingDraft,
    BookingStatus,
    BookingTransitionError,
    CustomerInfo,
    InvalidBookingDraftError,
    allowed_sources,
    create_pending_booking,
)
from rrs.domain.booking.events import BookingStatusChanged
from rrs.domain.common.ids import BookingId, StoreId, TableId, UserId
from rrs.domain.common.window import TimeWindow

NOW = datetime(2026, 11, 20, 12, 0, tzinfo=timezone.utc)


def _draft(**overrides) -> BookingDraft:
    values = {
        "store_id": StoreId("str_001"),
        "table_id": TableId("tbl_001"),
        "user_id": UserId("usr_001"),
        "customer": CustomerInfo(name="Ana", email="ana@example.com"),
        "party_size": 2,
        "booked_at": NOW + timedelta(hours=7),
        "duration_minutes": 120,
    }
    values.update(overrides)
    return BookingDraft(**values)


def test_valid_draft_becomes_pending_booking() -> None:
    booking = create_pending_booking(BookingId("bkg_001"), _draft(), NOW)

    assert booking.status == BookingStatus.PENDING
    assert booking.approved is False
    assert booking.window.end == NOW + timedelta(hours=9)
    assert booking.created_at == NOW


def test_draft_collects_every_violation() -> None:
    draft = _draft(
        customer=CustomerInfo(name="  ", email="not-an-email"),
        party_size=0,
        booked_at=NOW - timedelta(minutes=1),
        duration_minutes=0,
    )

    fields = [violation.field for violation in draft.violations(NOW)]

    assert fields == ["customerName", "partySize", "bookedAt", "durationMinutes", "customerEmail"]


def test_draft_duration_is_capped_at_one_day() -> None:
    assert _draft(duration_minutes=24 * 60).violations(NOW) == []

    violations = _draft(duration_minutes=24 * 60 + 1).violations(NOW)
    assert [violation.field for violation in violations] == ["durationMinutes"]

    with pytest.raises(InvalidBookingDraftError):
        create_pending_booking(BookingId("bkg_001"), _draft(duration_minutes=10**10), NOW)


def test_party_size_upper_bound() -> None:
    assert [v.field for v in _draft(party_size=21).violations(NOW)] == ["partySize"]
    assert _draft(party_size=20).violations(NOW) == []


def test_booking_at_now_is_not_in_the_future() -> None:
    assert [v.field for v in _draft(booked_at=NOW).violations(NOW)] == ["bookedAt"]


def test_invalid_draft_raises_with_violations() -> None:
    with pytest.raises(InvalidBookingDraftError) as exc_info:
        create_pending_booking(BookingId("bkg_001"), _draft(party_size=25), NOW)
    assert exc_info.value.violations[0].field == "partySize"


def test_transition_rules() -> None:
    booking = create_pending_booking(BookingId("bkg_001"), _draft(), NOW)

    approved = booking.transition_to(BookingStatus.APPROVED, NOW)
    assert approved.approved is True
    cancelled = approved.transition_to(BookingStatus.CANCELLED, NOW)
    assert cancelled.status.is_terminal

    with pytest.raises(BookingTransitionError):
        cancelled.transition_to(BookingStatus.APPROVED, NOW)
    with pytest.raises(BookingTransitionError):
        approved.transition_to(BookingStatus.DECLINED, NOW)


def test_allowed_sources() -> None:
    assert allowed_sources(BookingStatus.APPROVED) == frozenset({BookingStatus.PENDING})
    assert allowed_sources(BookingStatus.CANCELLED) == frozenset(
        {BookingStatus.PENDING, BookingStatus.APPROVED}
    )
    assert allowed_sources(BookingStatus.PENDING) == frozenset()


def test_only_active_bookings_conflict() -> None:
    booking = create_pending_booking(BookingId("bkg_001"), _draft(), NOW)
    overlapping = TimeWindow(start=booking.window.start + timedelta(minutes=30))

    assert booking.conflicts_with(overlapping)
    assert not booking.transition_to(BookingStatus.DECLINED, NOW).conflicts_with(overlapping)


def test_event_type_names() -> None:
    requested = BookingStatusChanged(
        booking_id=BookingId("bkg_001"),
        store_id=StoreId("str_001"),
        table_id=None,
        from_status=None,
        to_status=BookingStatus.PENDING,
        actor_id=None,
        occurred_at=NOW,
    )
    approved = BookingStatusChanged(
        booking_id=BookingId("bkg_001"),
        store_id=StoreId("str_001"),
        table_id=None,
        from_status=BookingStatus.PENDING,
        to_status=BookingStatus.APPROVED,
        actor_id=UserId("usr_owner"),
        occurred_at=NOW,
    )
    assert requested.event_type == "booking.requested"
    assert approved.event_type == "booking.approved"
