"""
Appointment Aggregate

Owns the appointment state machine, the participant list and the derived
end time. Every mutation records a domain event for the realtime fan-out.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from app.core.domain import (
    AggregateRoot,
    InvalidOperationException,
    ValidationException,
    generate_uuid_str,
)

from ..events import (
    AppointmentCancelled,
    AppointmentReminderDue,
    AppointmentScheduled,
    AppointmentUpdated,
    InvitationResponded,
)
from ..value_objects.appointment_details import AppointmentDetails, InPersonDetails
from ..value_objects.appointment_status import (
    AppointmentStatus,
    AppointmentType,
    InvitationResponse,
    ParticipantRole,
    ParticipantStatus,
)
from ..value_objects.calendar import CalendarBinding, ReminderFlags
from ..value_objects.participant import Participant, set_participant_status
from ..value_objects.time_window import TimeWindow, ensure_utc, window_of
from .doctor import Doctor
from .patient import Patient

DEFAULT_CANCELLATION_REASON = "No reason provided"


@dataclass
class Appointment(AggregateRoot[str]):
    """
    Appointment aggregate root.

    end_time is always start_time + duration_minutes; both are only changed
    through ``reschedule``. Cancelled is terminal.

    Example:
        ```python
        appointment = Appointment.schedule(
            title="Follow-up",
            doctor=doctor,
            patient=patient,
            start_time=datetime(2024, 1, 10, 10, 0, tzinfo=UTC),
            duration_minutes=30,
            details=InPersonDetails(location="Room 4"),
            created_by=doctor.user_id,
        )
        appointment.respond(patient.user_id, InvitationResponse.ACCEPT)
        appointment.cancel(reason="Doctor unavailable")
        ```
    """

    title: str = ""
    description: str | None = None
    notes: str | None = None

    # Parties
    doctor_id: str = ""
    patient_id: str = ""
    organization_id: str | None = None
    created_by: str = ""

    # Time
    start_time: datetime | None = None
    duration_minutes: int = 0
    end_time: datetime | None = None
    timezone: str = "UTC"

    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    details: AppointmentDetails = field(default_factory=InPersonDetails)
    participants: list[Participant] = field(default_factory=list)

    calendar: CalendarBinding | None = None
    reminders: ReminderFlags = field(default_factory=ReminderFlags)

    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def schedule(
        cls,
        title: str,
        doctor: Doctor,
        patient: Patient,
        start_time: datetime,
        duration_minutes: int,
        details: AppointmentDetails,
        created_by: str,
        organization_id: str | None = None,
        description: str | None = None,
        timezone: str = "UTC",
        appointment_id: str | None = None,
        now: datetime | None = None,
    ) -> "Appointment":
        """
        Create a new scheduled appointment.

        The doctor is the acting scheduler and starts out accepted; the
        patient starts out invited.
        """
        if not title or not title.strip():
            raise ValidationException("Title is required", field="title")
        if not created_by:
            raise ValidationException("Creator is required", field="created_by")

        window = window_of(start_time, duration_minutes)
        now = now or datetime.now(UTC)

        appointment = cls(
            id=appointment_id or generate_uuid_str(),
            title=title.strip(),
            description=description,
            doctor_id=str(doctor.id),
            patient_id=str(patient.id),
            organization_id=organization_id,
            created_by=created_by,
            start_time=window.start,
            duration_minutes=duration_minutes,
            end_time=window.end,
            timezone=timezone,
            details=details,
            participants=[
                Participant(
                    user_id=doctor.user_id,
                    email=doctor.email,
                    name=doctor.full_name,
                    role=ParticipantRole.DOCTOR,
                    status=ParticipantStatus.ACCEPTED,
                ),
                Participant(
                    user_id=patient.user_id,
                    email=patient.email,
                    name=patient.full_name,
                    role=ParticipantRole.PATIENT,
                    status=ParticipantStatus.INVITED,
                ),
            ],
            created_at=now,
            updated_at=now,
        )
        appointment._record_event(
            AppointmentScheduled(
                appointment_id=appointment.id,
                audience=appointment.audience(),
                snapshot=appointment.to_dict(),
            )
        )
        return appointment

    # Derived state

    @property
    def window(self) -> TimeWindow:
        if self.start_time is None or self.end_time is None:
            raise InvalidOperationException(operation="window", current_state="unscheduled")
        return TimeWindow(start=self.start_time, end=self.end_time)

    @property
    def appointment_type(self) -> AppointmentType:
        return self.details.appointment_type

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED

    def audience(self) -> tuple[str, ...]:
        """Creator plus every participant with a user account, in order, without duplicates."""
        ordered: list[str] = []
        for user_id in [self.created_by, *(p.user_id for p in self.participants)]:
            if user_id and user_id not in ordered:
                ordered.append(user_id)
        return tuple(ordered)

    def is_creator(self, user_id: str) -> bool:
        return bool(user_id) and self.created_by == user_id

    def participant_for(self, user_id: str) -> Participant | None:
        for participant in self.participants:
            if participant.is_user(user_id):
                return participant
        return None

    def can_be_viewed_by(self, user_id: str) -> bool:
        return self.is_creator(user_id) or self.participant_for(user_id) is not None

    # State transitions

    def _ensure_modifiable(self, operation: str) -> None:
        if self.status.is_terminal():
            raise InvalidOperationException(
                operation=operation,
                current_state=self.status.value,
                message=f"Appointment is {self.status.value} and can no longer be changed",
            )

    def reschedule(self, start_time: datetime | None = None, duration_minutes: int | None = None) -> bool:
        """
        Move the appointment, recomputing end_time.

        Returns:
            True if the window actually changed
        """
        self._ensure_modifiable("reschedule")
        new_start = ensure_utc(start_time) if start_time is not None else self.start_time
        new_duration = duration_minutes if duration_minutes is not None else self.duration_minutes
        if new_start is None:
            raise ValidationException("Start time is required", field="start_time")
        window = window_of(new_start, new_duration)
        if window.start == self.start_time and new_duration == self.duration_minutes:
            return False
        self.start_time = window.start
        self.duration_minutes = new_duration
        self.end_time = window.end
        return True

    def revise(
        self,
        title: str | None = None,
        description: str | None = None,
        notes: str | None = None,
        location: str | None = None,
    ) -> list[str]:
        """Apply descriptive edits and return the names of the fields that changed."""
        self._ensure_modifiable("update")
        changed: list[str] = []
        if title is not None:
            if not title.strip():
                raise ValidationException("Title cannot be blank", field="title")
            if title.strip() != self.title:
                self.title = title.strip()
                changed.append("title")
        if description is not None and description != self.description:
            self.description = description
            changed.append("description")
        if notes is not None and notes != self.notes:
            self.notes = notes
            changed.append("notes")
        if location is not None:
            if not isinstance(self.details, InPersonDetails):
                raise ValidationException(
                    f"Location only applies to in-person appointments, not {self.appointment_type.value}",
                    field="location",
                )
            if location != self.details.location:
                self.details = InPersonDetails(location=location)
                changed.append("location")
        return changed

    def change_status(self, new_status: AppointmentStatus) -> bool:
        """Move along the status state machine; a same-status request is a no-op."""
        if new_status == self.status:
            return False
        if not self.status.can_transition_to(new_status):
            raise InvalidOperationException(
                operation=f"change status to {new_status.value}",
                current_state=self.status.value,
            )
        self.status = new_status
        return True

    def record_update(self, changed_fields: list[str], now: datetime | None = None) -> None:
        if not changed_fields:
            return
        self.touch(now)
        self._record_event(
            AppointmentUpdated(
                appointment_id=self.id or "",
                audience=self.audience(),
                snapshot=self.to_dict(),
                changed_fields=tuple(changed_fields),
            )
        )

    def cancel(self, reason: str | None = None, now: datetime | None = None) -> None:
        if not self.status.can_be_cancelled():
            raise InvalidOperationException(
                operation="cancel",
                current_state=self.status.value,
                message=f"Cannot cancel an appointment that is {self.status.value}",
            )
        now = now or datetime.now(UTC)
        self.status = AppointmentStatus.CANCELLED
        self.cancellation_reason = reason or DEFAULT_CANCELLATION_REASON
        self.cancelled_at = now
        self.touch(now)
        self._record_event(
            AppointmentCancelled(
                appointment_id=self.id or "",
                audience=self.audience(),
                snapshot=self.to_dict(),
                reason=self.cancellation_reason,
            )
        )

    def respond(self, user_id: str, response: InvitationResponse, now: datetime | None = None) -> bool:
        """
        Record a participant's answer.

        Requesters that are not participants leave the appointment untouched,
        and repeating an answer changes nothing.

        Returns:
            True if a participant entry changed
        """
        self.participants, changed = set_participant_status(
            self.participants, user_id, response.to_participant_status()
        )
        if changed:
            self.touch(now)
            self._record_event(
                InvitationResponded(
                    appointment_id=self.id or "",
                    audience=self.audience(),
                    snapshot=self.to_dict(),
                    user_id=user_id,
                    response=response.value,
                )
            )
        return changed

    # Calendar and reminders

    def bind_calendar(self, binding: CalendarBinding) -> None:
        self.calendar = binding

    def unbind_calendar(self) -> None:
        self.calendar = None

    def needs_reminder(self, now: datetime, lead: timedelta, channel: str = "email") -> bool:
        if not self.status.is_active() or self.start_time is None:
            return False
        if getattr(self.reminders, channel):
            return False
        return now <= self.start_time <= now + lead

    def mark_reminder_sent(self, channel: str = "email") -> None:
        self.reminders = self.reminders.mark(channel)
        self._record_event(
            AppointmentReminderDue(
                appointment_id=self.id or "",
                audience=self.audience(),
                snapshot=self.to_dict(),
            )
        )

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "notes": self.notes,
            "doctor_id": self.doctor_id,
            "patient_id": self.patient_id,
            "organization_id": self.organization_id,
            "created_by": self.created_by,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_minutes": self.duration_minutes,
            "timezone": self.timezone,
            "appointment_type": self.appointment_type.value,
            "status": self.status.value,
            "details": self.details.to_dict(),
            "participants": [p.to_dict() for p in self.participants],
            "calendar_event_id": self.calendar.external_event_id if self.calendar else None,
            "cancellation_reason": self.cancellation_reason,
        }
