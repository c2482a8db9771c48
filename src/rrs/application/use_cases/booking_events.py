from __future__ import annotations

import logging
from datetime import datetime

from rrs.application.mappers.event_envelope import (
    serialize_booking_event,
    serialize_table_status_event,
)
from rrs.application.metrics.booking_lifecycle import (
    record_table_status_change,
    record_table_status_refresh_failure,
)
from rrs.application.ports.publisher import EventPublisher
from rrs.application.ports.repositories import BookingRepository, TableRepository
from rrs.application.use_cases.context import TraceContext
from rrs.domain.booking.entities import Booking
from rrs.domain.booking.events import BookingStatusChanged
from rrs.domain.common.ids import TableId
from rrs.domain.table.entities import Table, TableStatus

logger = logging.getLogger(__name__)


def publish_booking_event(
    publisher: EventPublisher,
    event: BookingStatusChanged,
    booking: Booking,
    trace_ctx: TraceContext,
) -> None:
    message = serialize_booking_event(
        event=event,
        booking=booking,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    try:
        publisher.publish(channel=f"events:{booking.store_id}", message=message)
    except Exception:
        logger.warning(
            "event_publish_failed",
            exc_info=True,
            extra={"booking_id": str(booking.booking_id), "event_type": event.event_type},
        )


def publish_table_status(
    publisher: EventPublisher,
    table: Table,
    now: datetime,
    trace_ctx: TraceContext,
) -> None:
    message = serialize_table_status_event(
        occurred_at=now,
        table=table,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    try:
        publisher.publish(channel=f"events:{table.store_id}", message=message)
    except Exception:
        logger.warning(
            "event_publish_failed",
            exc_info=True,
            extra={"table_id": str(table.table_id), "event_type": "table.status_changed"},
        )


def mark_table_reserved(
    table_repository: TableRepository,
    publisher: EventPublisher,
    table: Table,
    now: datetime,
    trace_ctx: TraceContext,
) -> None:
    """Best-effort hint; the booking row stays authoritative when this fails."""
    if table.status != TableStatus.AVAILABLE:
        return
    try:
        table_repository.set_status(table.table_id, TableStatus.RESERVED, now)
    except Exception:
        record_table_status_refresh_failure()
        logger.exception(
            "table_status_refresh_failed",
            extra={"table_id": str(table.table_id), "status": TableStatus.RESERVED.value},
        )
        return
    record_table_status_change(TableStatus.RESERVED)
    publish_table_status(publisher, table.with_status(TableStatus.RESERVED, now), now, trace_ctx)


def release_table_if_idle(
    table_repository: TableRepository,
    booking_repository: BookingRepository,
    publisher: EventPublisher,
    table_id: TableId | None,
    now: datetime,
    trace_ctx: TraceContext,
) -> None:
    """Flip a reserved table back to available when no active booking
    occupies it right now. Cached hint only; failures are logged."""
    if table_id is None:
        return
    try:
        table = table_repository.get(table_id)
        if table is None or table.status != TableStatus.RESERVED:
            return
        occupied_now = any(
            booking.status.is_active and booking.window.contains(now)
            for booking in booking_repository.list_for_table(table_id)
        )
        if occupied_now:
            return
        table_repository.set_status(table_id, TableStatus.AVAILABLE, now)
    except Exception:
        record_table_status_refresh_failure()
        logger.exception(
            "table_status_refresh_failed",
            extra={"table_id": str(table_id), "status": TableStatus.AVAILABLE.value},
        )
        return
    record_table_status_change(TableStatus.AVAILABLE)
    publish_table_status(publisher, table.with_status(TableStatus.AVAILABLE, now), now, trace_ctx)
