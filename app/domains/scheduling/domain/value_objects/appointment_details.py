"""
Appointment Details Variants

An appointment carries exactly one of these, so the meeting room binding
exists only for virtual appointments and the location only for in-person ones.
"""

from dataclasses import dataclass
from typing import Any

from app.core.domain import ValueObject

from .appointment_status import AppointmentType


@dataclass(frozen=True)
class MeetingRoomBinding(ValueObject):
    """Shareable coordinates of the meeting room bound to a virtual appointment."""

    room_id: str
    room_link: str
    access_code: str
    password: str | None = None

    def _validate(self) -> None:
        if not self.room_id or not self.access_code:
            raise ValueError("Meeting room binding requires room_id and access_code")

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "room_link": self.room_link,
            "access_code": self.access_code,
            "password": self.password,
        }


@dataclass(frozen=True)
class InPersonDetails(ValueObject):
    location: str | None = None

    @property
    def appointment_type(self) -> AppointmentType:
        return AppointmentType.IN_PERSON

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.appointment_type.value, "location": self.location}


@dataclass(frozen=True)
class VirtualDetails(ValueObject):
    room: MeetingRoomBinding

    @property
    def appointment_type(self) -> AppointmentType:
        return AppointmentType.VIRTUAL

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.appointment_type.value, "room": self.room.to_dict()}


@dataclass(frozen=True)
class PhoneDetails(ValueObject):
    @property
    def appointment_type(self) -> AppointmentType:
        return AppointmentType.PHONE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.appointment_type.value}


AppointmentDetails = InPersonDetails | VirtualDetails | PhoneDetails
