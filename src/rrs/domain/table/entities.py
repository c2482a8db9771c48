from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from rrs.domain.common.ids import StoreId, TableId

DEFAULT_CAPACITY = 4


class TableStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    OCCUPIED = "occupied"


class TableLocation(str, Enum):
    INDOOR = "in"
    OUTDOOR = "out"


@dataclass(frozen=True)
class Table:
    table_id: TableId
    store_id: StoreId
    name: str
    capacity: int
    location: TableLocation
    smoking_allowed: bool
    status: TableStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")

    def with_status(self, status: TableStatus, now: datetime) -> Table:
        if self.status == status:
            return self
        return replace(self, status=status, updated_at=now)

    def ensure_bookable(self) -> None:
        if not self.is_active:
            raise TableInactiveError(f"table {self.table_id} is not active")

    def seats(self, party_size: int) -> bool:
        return party_size <= self.capacity


def parse_table_status(value: str) -> TableStatus:
    try:
        return TableStatus(value.lower())
    except ValueError as exc:
        raise InvalidTableStatusValueError(f"invalid table status: {value}") from exc


class TableInactiveError(Exception):
    pass


class InvalidTableStatusValueError(Exception):
    pass
