from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from rrs.application.notifications import decide_notification
from rrs.domain.booking.entities import Booking
from rrs.domain.booking.events import BookingStatusChanged
from rrs.domain.table.entities import Table


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    store_id: str,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "store_id": store_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_booking_event(
    *,
    event: BookingStatusChanged,
    booking: Booking,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    intent = decide_notification(event, booking)
    return _serialize_event(
        event_type=event.event_type,
        occurred_at=event.occurred_at,
        store_id=str(booking.store_id),
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "bookingId": str(booking.booking_id),
            "tableId": str(booking.table_id) if booking.table_id is not None else None,
            "fromStatus": event.from_status.value if event.from_status else None,
            "status": booking.status.value,
            "approved": booking.approved,
            "bookedAt": booking.window.start.isoformat(),
            "endsAt": booking.window.end.isoformat(),
            "partySize": booking.party_size,
            "customerName": booking.customer.name,
            "actorId": str(event.actor_id) if event.actor_id is not None else None,
            "notify": {"audience": intent.audience, "channel": intent.channel},
        },
    )


def serialize_table_status_event(
    *,
    occurred_at: datetime,
    table: Table,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type="table.status_changed",
        occurred_at=occurred_at,
        store_id=str(table.store_id),
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "tableId": str(table.table_id),
            "storeId": str(table.store_id),
            "status": table.status.value,
        },
    )
