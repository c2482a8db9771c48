from __future__ import annotations

from rrs.application.dto.responses import BookingListResponse, BookingResponse, CustomerResponse
from rrs.domain.booking.entities import Booking


def to_booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        bookingId=str(booking.booking_id),
        storeId=str(booking.store_id),
        tableId=str(booking.table_id) if booking.table_id is not None else None,
        userId=str(booking.user_id) if booking.user_id is not None else None,
        customer=CustomerResponse(
            name=booking.customer.name,
            email=booking.customer.email,
            phone=booking.customer.phone,
        ),
        partySize=booking.party_size,
        bookedAt=booking.window.start,
        endsAt=booking.window.end,
        durationMinutes=booking.window.duration_minutes,
        status=booking.status.value,
        approved=booking.approved,
        specialRequests=booking.special_requests,
        acceptCode=booking.accept_code,
        declineReason=booking.decline_reason,
        createdAt=booking.created_at,
        updatedAt=booking.updated_at,
    )


def to_booking_list_response(bookings: list[Booking]) -> BookingListResponse:
    return BookingListResponse(bookings=[to_booking_response(booking) for booking in bookings])
