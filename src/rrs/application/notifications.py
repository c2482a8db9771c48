from __future__ import annotations

from dataclasses import dataclass

from rrs.domain.booking.entities import Booking, BookingStatus
from rrs.domain.booking.events import BookingStatusChanged

OWNER = "owner"
CUSTOMER = "customer"


@dataclass(frozen=True)
class NotificationIntent:
    """Who should hear about a booking change and over which channel.

    Delivery is someone else's job; this only records the decision.
    """

    audience: str
    channel: str


def decide_notification(event: BookingStatusChanged, booking: Booking) -> NotificationIntent:
    if event.to_status == BookingStatus.PENDING:
        return NotificationIntent(audience=OWNER, channel="app")
    if event.to_status == BookingStatus.CANCELLED and _cancelled_by_customer(event, booking):
        return NotificationIntent(audience=OWNER, channel="app")
    return NotificationIntent(audience=CUSTOMER, channel=_customer_channel(booking))


def _cancelled_by_customer(event: BookingStatusChanged, booking: Booking) -> bool:
    return booking.user_id is not None and event.actor_id == booking.user_id


def _customer_channel(booking: Booking) -> str:
    if booking.customer.email:
        return "email"
    if booking.customer.phone:
        return "phone"
    return "none"
