from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

DEFAULT_DURATION_MINUTES = 120
MAX_DURATION_MINUTES = 24 * 60


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, start + duration_minutes)``."""

    start: datetime
    duration_minutes: int = DEFAULT_DURATION_MINUTES

    def __post_init__(self) -> None:
        if self.start.tzinfo is None:
            object.__setattr__(self, "start", self.start.replace(tzinfo=timezone.utc))
        if self.duration_minutes < 1:
            raise ValueError("duration_minutes must be >= 1")

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    def overlaps(self, other: TimeWindow) -> bool:
        # touching endpoints do not overlap
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end
