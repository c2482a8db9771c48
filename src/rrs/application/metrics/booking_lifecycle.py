from __future__ import annotations

from prometheus_client import Counter

from rrs.domain.booking.entities import BookingStatus
from rrs.domain.table.entities import TableStatus

BOOKINGS_REQUESTED_TOTAL = Counter(
    "rrs_bookings_requested_total",
    "Total number of bookings created as pending.",
    ["store_id"],
)

BOOKING_CONFLICTS_TOTAL = Counter(
    "rrs_booking_conflicts_total",
    "Total number of booking attempts rejected for an overlapping window.",
    ["store_id", "stage"],
)

BOOKING_TRANSITION_TOTAL = Counter(
    "rrs_booking_transition_total",
    "Total number of booking lifecycle transitions.",
    ["from", "to"],
)

BULK_APPROVED_TOTAL = Counter(
    "rrs_bulk_approved_bookings_total",
    "Total number of bookings approved through bulk approval.",
    ["store_id"],
)

AVAILABILITY_CHECK_FAILURES_TOTAL = Counter(
    "rrs_availability_check_failures_total",
    "Availability checks answered 'unavailable' because the lookup failed.",
    ["reason"],
)

TABLE_STATUS_CHANGES_TOTAL = Counter(
    "rrs_table_status_changes_total",
    "Total number of table status changes.",
    ["status"],
)

TABLE_STATUS_REFRESH_FAILURES_TOTAL = Counter(
    "rrs_table_status_refresh_failures_total",
    "Best-effort table status updates that failed.",
)


def record_booking_requested(store_id: str) -> None:
    BOOKINGS_REQUESTED_TOTAL.labels(store_id=store_id).inc()


def record_booking_conflict(store_id: str, stage: str) -> None:
    BOOKING_CONFLICTS_TOTAL.labels(store_id=store_id, stage=stage).inc()


def record_transition(from_status: BookingStatus, to_status: BookingStatus) -> None:
    BOOKING_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_bulk_approved(store_id: str, count: int) -> None:
    BULK_APPROVED_TOTAL.labels(store_id=store_id).inc(count)


def record_availability_check_failure(reason: str) -> None:
    AVAILABILITY_CHECK_FAILURES_TOTAL.labels(reason=reason).inc()


def record_table_status_change(status: TableStatus) -> None:
    TABLE_STATUS_CHANGES_TOTAL.labels(status=status.value).inc()


def record_table_status_refresh_failure() -> None:
    TABLE_STATUS_REFRESH_FAILURES_TOTAL.inc()
