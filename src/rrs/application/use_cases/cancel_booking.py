from __future__ import annotations

from datetime import datetime, timezone

from rrs.application.auth import AuthContext
from rrs.application.dto.responses import BookingResponse
from rrs.application.mappers.booking_mapper import to_booking_response
from rrs.application.use_cases.booking_events import release_table_if_idle
from rrs.application.use_cases.booking_transition import BookingTransition
from rrs.application.use_cases.context import TraceContext
from rrs.application.use_cases.ownership import is_requester
from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import BookingId


class CancelBooking(BookingTransition):
    target = BookingStatus.CANCELLED

    def execute(
        self,
        booking_id: BookingId,
        actor: AuthContext,
        trace_ctx: TraceContext,
    ) -> BookingResponse:
        booking = self._load(booking_id)
        if not is_requester(actor, booking):
            self._gate.ensure_can_manage_booking(actor, booking)
        updated, changed = self._apply(booking, actor, trace_ctx)
        if changed:
            release_table_if_idle(
                self._table_repository,
                self._booking_repository,
                self._publisher,
                updated.table_id,
                datetime.now(timezone.utc),
                trace_ctx,
            )
        return to_booking_response(updated)
