from __future__ import annotations

from typing import NewType

StoreId = NewType("StoreId", str)
TableId = NewType("TableId", str)
BookingId = NewType("BookingId", str)
UserId = NewType("UserId", str)
