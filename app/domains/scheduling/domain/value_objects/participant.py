"""
Appointment Participant Value Object
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from app.core.domain import ValueObject

from .appointment_status import ParticipantRole, ParticipantStatus


@dataclass(frozen=True)
class Participant(ValueObject):
    """
    A person attached to an appointment.

    user_id may be None for patients without a portal account; such a
    participant still receives e-mail but can never match a requester.
    """

    email: str | None
    name: str
    role: ParticipantRole
    status: ParticipantStatus = ParticipantStatus.INVITED
    user_id: str | None = None
    joined_at: datetime | None = None

    def is_user(self, user_id: str) -> bool:
        return self.user_id is not None and self.user_id == user_id

    def with_status(self, status: ParticipantStatus) -> "Participant":
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "status": self.status.value,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Participant":
        joined_at = data.get("joined_at")
        return cls(
            user_id=data.get("user_id"),
            email=data.get("email"),
            name=data.get("name") or "",
            role=ParticipantRole(data["role"]),
            status=ParticipantStatus(data.get("status") or ParticipantStatus.INVITED.value),
            joined_at=datetime.fromisoformat(joined_at) if joined_at else None,
        )


def set_participant_status(
    participants: list[Participant],
    user_id: str,
    status: ParticipantStatus,
) -> tuple[list[Participant], bool]:
    """
    Locate the participant for user_id and replace it with the new status.

    Entries that do not match are returned untouched. The flag reports whether
    anything actually changed, so repeating the same answer is a no-op.
    """
    changed = False
    updated: list[Participant] = []
    for participant in participants:
        if participant.is_user(user_id) and participant.status != status:
            updated.append(participant.with_status(status))
            changed = True
        else:
            updated.append(participant)
    return updated, changed
