"""
External Calendar Sync Port
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from ...domain.value_objects.calendar import CalendarAccount, CalendarBinding


@dataclass(frozen=True)
class CalendarEventData:
    title: str
    start_time: datetime
    end_time: datetime
    timezone: str = "UTC"
    description: str | None = None
    location: str | None = None
    attendees: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "timezone": self.timezone,
            "attendees": list(self.attendees),
        }


@runtime_checkable
class ICalendarSync(Protocol):
    """
    Interface for the external calendar provider.

    Credentials are passed on every call; implementations keep no per-user state.
    """

    async def create_event(self, account: CalendarAccount, event: CalendarEventData) -> CalendarBinding:
        """Create an event and return its external id and link."""
        ...

    async def update_event(
        self,
        account: CalendarAccount,
        event_id: str,
        event: CalendarEventData,
    ) -> CalendarBinding:
        """Replace an existing event."""
        ...

    async def delete_event(self, account: CalendarAccount, event_id: str) -> None:
        """Delete an event."""
        ...
