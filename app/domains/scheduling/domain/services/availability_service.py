"""
Availability Service for Scheduling Domain

Domain service that turns a doctor's booked appointments for a day into the
list of bookable slots inside working hours.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.domain import ValidationException

from ..value_objects.time_window import TimeWindow, overlaps, window_of


@dataclass(frozen=True)
class WorkingHours:
    """
    Working-hours policy used for slot generation.

    Attributes:
        opens_at: First candidate start, local time
        closes_at: Candidate starts stop before this local time
        step_minutes: Distance between consecutive candidate starts
        clip_to_close: Drop slots whose end runs past closes_at
        timezone: IANA zone the local times are expressed in
    """

    opens_at: time = time(9, 0)
    closes_at: time = time(18, 0)
    step_minutes: int = 30
    clip_to_close: bool = False
    timezone: str = "UTC"

    def __post_init__(self):
        if self.closes_at <= self.opens_at:
            raise ValueError("Working hours must close after they open")
        if self.step_minutes <= 0:
            raise ValueError("Slot step must be positive")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass
class AvailableSlot:
    """Represents a bookable slot. Advisory only; nothing is reserved."""

    doctor_id: str
    window: TimeWindow

    @property
    def start_time(self) -> datetime:
        return self.window.start

    @property
    def end_time(self) -> datetime:
        return self.window.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "doctor_id": self.doctor_id,
            "start_time": self.window.start.isoformat(),
            "end_time": self.window.end.isoformat(),
        }


class AvailabilityService:
    """
    Domain service for slot generation.

    Candidate starts walk from opening time towards closing time in fixed
    steps. A candidate is offered iff its window overlaps no booked window.
    Slots may run past closing time unless ``clip_to_close`` is set, and
    slots in the past are not filtered out.

    Example:
        ```python
        service = AvailabilityService(WorkingHours())
        booked = [TimeWindow.of(datetime(2024, 1, 10, 10, 0, tzinfo=UTC), 60)]
        slots = service.available_slots("doc-1", date(2024, 1, 10), 60, booked)
        slots[0].window  # 09:00 - 10:00
        ```
    """

    def __init__(self, working_hours: WorkingHours | None = None, default_duration_minutes: int = 60):
        self.working_hours = working_hours or WorkingHours()
        self.default_duration_minutes = default_duration_minutes

    def day_window(self, day: date) -> TimeWindow:
        """The whole local calendar day as [00:00, next day 00:00)."""
        tz = self.working_hours.tz
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
        return TimeWindow(start=start, end=end)

    def search_window(self, day: date, duration_minutes: int | None = None) -> TimeWindow:
        """
        Window that must be searched for booked appointments.

        Covers the local day and, when slots may run past midnight, the tail
        of the last candidate slot.
        """
        duration = self._resolve_duration(duration_minutes)
        day_window = self.day_window(day)
        starts = list(self._candidate_starts(day))
        if not starts:
            return day_window
        last_end = starts[-1] + timedelta(minutes=duration)
        return TimeWindow(start=day_window.start, end=max(day_window.end, last_end))

    def available_slots(
        self,
        doctor_id: str,
        day: date,
        duration_minutes: int | None,
        booked: Iterable[TimeWindow],
    ) -> list[AvailableSlot]:
        """
        Generate the bookable slots of a day.

        Args:
            doctor_id: Doctor the slots belong to
            day: Local calendar day
            duration_minutes: Slot length (default used when None)
            booked: Windows of the doctor's non-cancelled appointments

        Returns:
            Ordered list of available slots
        """
        duration = self._resolve_duration(duration_minutes)
        booked_windows = list(booked)
        close = datetime.combine(day, self.working_hours.closes_at, tzinfo=self.working_hours.tz)

        slots: list[AvailableSlot] = []
        for start in self._candidate_starts(day):
            candidate = window_of(start, duration)
            if self.working_hours.clip_to_close and candidate.end > close:
                continue
            if any(overlaps(candidate, taken) for taken in booked_windows):
                continue
            slots.append(AvailableSlot(doctor_id=doctor_id, window=candidate))
        return slots

    def _candidate_starts(self, day: date) -> Iterator[datetime]:
        hours = self.working_hours
        current = datetime.combine(day, hours.opens_at, tzinfo=hours.tz)
        close = datetime.combine(day, hours.closes_at, tzinfo=hours.tz)
        step = timedelta(minutes=hours.step_minutes)
        while current < close:
            yield current
            current += step

    def _resolve_duration(self, duration_minutes: int | None) -> int:
        duration = self.default_duration_minutes if duration_minutes is None else duration_minutes
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise ValidationException("Slot duration must be a positive number of minutes", field="duration")
        return duration
