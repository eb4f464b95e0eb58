"""
Scheduling Domain Value Objects

Status and classification enums for appointments and their participants.
"""

from app.core.domain import StatusEnum


class AppointmentStatus(StatusEnum):
    """
    Appointment lifecycle states.

    Valid transitions:
    - SCHEDULED -> CONFIRMED, COMPLETED, NO_SHOW, CANCELLED
    - CONFIRMED -> COMPLETED, NO_SHOW, CANCELLED
    - COMPLETED, NO_SHOW, CANCELLED -> (terminal)
    """

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

    def can_transition_to(self, new_status: "AppointmentStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status.value in _STATUS_TRANSITIONS.get(self.value, ())

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return not _STATUS_TRANSITIONS.get(self.value)

    def is_active(self) -> bool:
        """Check if the appointment still occupies the doctor's calendar."""
        return self.value in ("scheduled", "confirmed")

    def can_be_cancelled(self) -> bool:
        return self.can_transition_to(AppointmentStatus.CANCELLED)


_STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "scheduled": ("confirmed", "completed", "no_show", "cancelled"),
    "confirmed": ("completed", "no_show", "cancelled"),
    "completed": (),
    "no_show": (),
    "cancelled": (),
}


class AppointmentType(StatusEnum):
    """How the appointment takes place."""

    IN_PERSON = "in-person"
    VIRTUAL = "virtual"
    PHONE = "phone"


class ParticipantRole(StatusEnum):
    """Role of a person attached to an appointment."""

    DOCTOR = "doctor"
    PATIENT = "patient"
    OBSERVER = "observer"


class ParticipantStatus(StatusEnum):
    """Invitation state of an appointment participant."""

    INVITED = "invited"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    JOINED = "joined"


class InvitationResponse(StatusEnum):
    """Answer a participant gives to an invitation."""

    ACCEPT = "accept"
    DECLINE = "decline"

    def to_participant_status(self) -> ParticipantStatus:
        if self is InvitationResponse.ACCEPT:
            return ParticipantStatus.ACCEPTED
        return ParticipantStatus.DECLINED
