"""
External Calendar Value Objects
"""

from dataclasses import dataclass

from app.core.domain import ValueObject


@dataclass(frozen=True)
class CalendarAccount(ValueObject):
    """
    Credentials of the external calendar an appointment is mirrored into.

    Passed explicitly to the calendar collaborator on every call instead of
    living in a process-wide client.
    """

    access_token: str
    calendar_id: str = "primary"

    def _validate(self) -> None:
        if not self.access_token:
            raise ValueError("Calendar account requires an access token")


@dataclass(frozen=True)
class CalendarBinding(ValueObject):
    """Reference to the event created in the external calendar."""

    external_event_id: str
    external_event_link: str | None = None


@dataclass(frozen=True)
class ReminderFlags(ValueObject):
    """Per-channel markers that stop a reminder from being sent twice."""

    email: bool = False
    sms: bool = False

    def mark(self, channel: str) -> "ReminderFlags":
        if channel not in ("email", "sms"):
            raise ValueError(f"Unknown reminder channel: {channel}")
        return ReminderFlags(
            email=self.email or channel == "email",
            sms=self.sms or channel == "sms",
        )
