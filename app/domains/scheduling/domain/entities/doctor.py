"""
Doctor Entity

Read-side view of a doctor as the scheduler needs it. Registration and
profile management live outside this service.
"""

from dataclasses import dataclass, field

from app.core.domain import Entity

from ..value_objects.calendar import CalendarAccount


@dataclass
class Doctor(Entity[str]):
    user_id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    specialization: str | None = None
    calendar_account: CalendarAccount | None = None
    organization_ids: list[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_calendar(self) -> bool:
        return self.calendar_account is not None
