from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from rrs.domain.booking.entities import BookingStatus
from rrs.domain.common.ids import BookingId, StoreId, TableId, UserId


@dataclass(frozen=True)
class BookingStatusChanged:
    booking_id: BookingId
    store_id: StoreId
    table_id: TableId | None
    from_status: BookingStatus | None
    to_status: BookingStatus
    actor_id: UserId | None
    occurred_at: datetime

    @property
    def event_type(self) -> str:
        if self.from_status is None:
            return "booking.requested"
        return f"booking.{self.to_status.value}"
