"""
Time Window Value Object

Half-open [start, end) intervals used by conflict detection and slot
generation. Both call sites go through ``overlaps`` so that a window ending
exactly when another starts is never treated as a clash.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from app.core.domain import ValidationException, ValueObject

MAX_DURATION_MINUTES = 24 * 60


def ensure_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Half-open time interval [start, end).

    Example:
        ```python
        morning = TimeWindow.of(datetime(2024, 1, 10, 10, 0, tzinfo=UTC), 30)
        morning.end  # 10:30, exclusive
        ```
    """

    start: datetime
    end: datetime

    def _validate(self) -> None:
        if self.end <= self.start:
            raise ValueError("Time window end must be after its start")

    @classmethod
    def of(cls, start: datetime, duration_minutes: int) -> "TimeWindow":
        """Build the window [start, start + duration)."""
        return window_of(start, duration_minutes)

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeWindow") -> bool:
        return overlaps(self, other)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"


def window_of(start: datetime, duration_minutes: int) -> TimeWindow:
    """
    Convert (start, duration) into a half-open window.

    Args:
        start: Window start; naive datetimes are interpreted as UTC
        duration_minutes: Positive length of the window

    Returns:
        TimeWindow [start, start + duration_minutes)

    Raises:
        ValidationException: If duration is not a positive integer of at most one day
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise ValidationException("Duration must be a positive number of minutes", field="duration")
    if duration_minutes > MAX_DURATION_MINUTES:
        raise ValidationException("Duration cannot exceed one day", field="duration")
    start = ensure_utc(start)
    return TimeWindow(start=start, end=start + timedelta(minutes=duration_minutes))


def overlaps(a: TimeWindow, b: TimeWindow) -> bool:
    """True iff the windows share at least one instant; touching boundaries do not count."""
    return a.start < b.end and b.start < a.end
