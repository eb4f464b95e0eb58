"""
Scheduling Domain Events

Recorded by the Appointment aggregate and fanned out to the per-user
realtime channels of everyone in ``audience``.
"""

from dataclasses import dataclass, field
from typing import Any

from app.core.domain import DomainEvent


@dataclass(frozen=True)
class AppointmentEvent(DomainEvent):
    """Base for appointment changes; ``change_type`` is what subscribers see."""

    appointment_id: str = ""
    audience: tuple[str, ...] = ()
    snapshot: dict[str, Any] = field(default_factory=dict)

    change_type = "updated"


@dataclass(frozen=True)
class AppointmentScheduled(AppointmentEvent):
    change_type = "scheduled"


@dataclass(frozen=True)
class AppointmentUpdated(AppointmentEvent):
    changed_fields: tuple[str, ...] = ()

    change_type = "updated"


@dataclass(frozen=True)
class AppointmentCancelled(AppointmentEvent):
    reason: str = ""

    change_type = "cancelled"


@dataclass(frozen=True)
class InvitationResponded(AppointmentEvent):
    user_id: str = ""
    response: str = ""

    change_type = "responded"


@dataclass(frozen=True)
class AppointmentReminderDue(AppointmentEvent):
    message: str = "Your appointment is starting soon"

    change_type = "reminder"
