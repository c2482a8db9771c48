from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from rrs.domain.common.ids import BookingId, StoreId, TableId, UserId
from rrs.domain.common.window import MAX_DURATION_MINUTES, TimeWindow

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.APPROVED})

_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.APPROVED, BookingStatus.DECLINED, BookingStatus.CANCELLED}
    ),
    BookingStatus.APPROVED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.DECLINED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def allowed_sources(target: BookingStatus) -> frozenset[BookingStatus]:
    """Statuses from which ``target`` may be reached."""
    return frozenset(source for source, targets in _TRANSITIONS.items() if target in targets)


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class Violation:
    field: str
    message: str


@dataclass(frozen=True)
class BookingDraft:
    store_id: StoreId
    table_id: TableId | None
    user_id: UserId | None
    customer: CustomerInfo
    party_size: int
    booked_at: datetime
    duration_minutes: int
    special_requests: str | None = None

    def __post_init__(self) -> None:
        if self.booked_at.tzinfo is None:
            object.__setattr__(self, "booked_at", self.booked_at.replace(tzinfo=timezone.utc))

    def violations(self, now: datetime) -> list[Violation]:
        """Every rule the draft breaks, in a stable order."""
        found: list[Violation] = []
        if not self.customer.name or not self.customer.name.strip():
            found.append(Violation("customerName", "customer name is required"))
        if self.party_size < MIN_PARTY_SIZE:
            found.append(Violation("partySize", f"party size must be at least {MIN_PARTY_SIZE}"))
        elif self.party_size > MAX_PARTY_SIZE:
            found.append(Violation("partySize", f"party size cannot exceed {MAX_PARTY_SIZE}"))
        if self.booked_at <= now:
            found.append(Violation("bookedAt", "booking must be in the future"))
        if self.duration_minutes < 1:
            found.append(Violation("durationMinutes", "duration must be at least 1 minute"))
        elif self.duration_minutes > MAX_DURATION_MINUTES:
            found.append(
                Violation("durationMinutes", f"duration cannot exceed {MAX_DURATION_MINUTES} minutes")
            )
        if self.customer.email and "@" not in self.customer.email:
            found.append(Violation("customerEmail", "customer email must contain '@'"))
        return found


@dataclass(frozen=True)
class Booking:
    booking_id: BookingId
    store_id: StoreId
    table_id: TableId | None
    user_id: UserId | None
    customer: CustomerInfo
    party_size: int
    window: TimeWindow
    status: BookingStatus
    created_at: datetime
    special_requests: str | None = None
    accept_code: str | None = None
    decline_reason: str | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not MIN_PARTY_SIZE <= self.party_size <= MAX_PARTY_SIZE:
            raise ValueError(f"party_size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}")

    @property
    def approved(self) -> bool:
        return self.status == BookingStatus.APPROVED

    def transition_to(self, target: BookingStatus, now: datetime) -> Booking:
        if target not in _TRANSITIONS[self.status]:
            raise BookingTransitionError(
                f"cannot move booking {self.booking_id} from status={self.status.value} "
                f"to status={target.value}"
            )
        return replace(self, status=target, updated_at=now)

    def conflicts_with(self, window: TimeWindow) -> bool:
        return self.status.is_active and self.window.overlaps(window)


def create_pending_booking(booking_id: BookingId, draft: BookingDraft, now: datetime) -> Booking:
    violations = draft.violations(now)
    if violations:
        raise InvalidBookingDraftError(violations)
    return Booking(
        booking_id=booking_id,
        store_id=draft.store_id,
        table_id=draft.table_id,
        user_id=draft.user_id,
        customer=CustomerInfo(
            name=draft.customer.name.strip(),
            email=draft.customer.email or None,
            phone=draft.customer.phone or None,
        ),
        party_size=draft.party_size,
        window=TimeWindow(start=draft.booked_at, duration_minutes=draft.duration_minutes),
        status=BookingStatus.PENDING,
        created_at=now,
        special_requests=draft.special_requests or None,
    )


class BookingTransitionError(Exception):
    pass


class InvalidBookingDraftError(Exception):
    def __init__(self, violations: list[Violation]) -> None:
        super().__init__("; ".join(f"{v.field}: {v.message}" for v in violations))
        self.violations = violations
