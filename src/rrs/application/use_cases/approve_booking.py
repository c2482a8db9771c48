from __future__ import annotations

import secrets

from rrs.application.auth import AuthContext
from rrs.application.dto.responses import BookingResponse
from rrs.application.mappers.booking_mapper import to_booking_response
from rrs.application.use_cases.booking_transition import BookingTransition
from rrs.application.use_cases.context import TraceContext
from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import BookingId


def new_accept_code() -> str:
    return secrets.token_hex(3).upper()


class ApproveBooking(BookingTransition):
    """Owner/admin approval. The slot was claimed at request time, so the
    availability check is not repeated."""

    target = BookingStatus.APPROVED

    def execute(
        self,
        booking_id: BookingId,
        actor: AuthContext,
        trace_ctx: TraceContext,
    ) -> BookingResponse:
        booking = self._load(booking_id)
        self._gate.ensure_can_manage_booking(actor, booking)
        updated, _ = self._apply(booking, actor, trace_ctx, accept_code=new_accept_code())
        return to_booking_response(updated)
