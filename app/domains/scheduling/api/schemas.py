"""
Scheduling API Schemas

Pydantic schemas for API request/response validation. Required business
fields are optional here so that their absence is reported by the use case
with a 400, like every other scheduling validation error.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities.appointment import Appointment
from ..domain.services.availability_service import AvailableSlot
from ..domain.value_objects.appointment_details import InPersonDetails, VirtualDetails


class AppointmentCreateRequest(BaseModel):
    """Appointment creation schema."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    doctor_id: str | None = Field(default=None, alias="doctorId")
    patient_id: str | None = Field(default=None, alias="patientId")
    organization_id: str | None = Field(default=None, alias="organizationId")
    start_time: datetime | None = Field(default=None, alias="startTime")
    duration: int | None = None
    appointment_type: str = Field(default="in-person", alias="type")
    location: str | None = None
    timezone: str | None = None


class AppointmentUpdateRequest(BaseModel):
    """Partial update; omitted fields stay unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    notes: str | None = None
    location: str | None = None
    start_time: datetime | None = Field(default=None, alias="startTime")
    duration: int | None = None
    status: str | None = None


class CancelAppointmentRequestBody(BaseModel):
    reason: str | None = None


class ParticipantResponse(BaseModel):
    user_id: str | None = None
    email: str | None = None
    name: str
    role: str
    status: str


class MeetingRoomInfo(BaseModel):
    room_id: str
    room_link: str
    access_code: str
    password: str | None = None


class AppointmentResponse(BaseModel):
    """Appointment response schema."""

    id: str
    title: str
    description: str | None = None
    notes: str | None = None
    doctor_id: str
    patient_id: str
    organization_id: str | None = None
    created_by: str
    start_time: datetime
    end_time: datetime
    duration: int
    timezone: str
    appointment_type: str
    status: str
    location: str | None = None
    meeting_room: MeetingRoomInfo | None = None
    participants: list[ParticipantResponse] = Field(default_factory=list)
    calendar_event_id: str | None = None
    calendar_event_link: str | None = None
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentResponse":
        location = None
        room = None
        if isinstance(appointment.details, InPersonDetails):
            location = appointment.details.location
        elif isinstance(appointment.details, VirtualDetails):
            room = MeetingRoomInfo(**appointment.details.room.to_dict())
        return cls(
            id=str(appointment.id),
            title=appointment.title,
            description=appointment.description,
            notes=appointment.notes,
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            organization_id=appointment.organization_id,
            created_by=appointment.created_by,
            start_time=appointment.window.start,
            end_time=appointment.window.end,
            duration=appointment.duration_minutes,
            timezone=appointment.timezone,
            appointment_type=appointment.appointment_type.value,
            status=appointment.status.value,
            location=location,
            meeting_room=room,
            participants=[ParticipantResponse(**p.to_dict()) for p in appointment.participants],
            calendar_event_id=appointment.calendar.external_event_id if appointment.calendar else None,
            calendar_event_link=appointment.calendar.external_event_link if appointment.calendar else None,
            cancellation_reason=appointment.cancellation_reason,
            cancelled_at=appointment.cancelled_at,
        )


class AvailableSlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_slot(cls, slot: AvailableSlot) -> "AvailableSlotResponse":
        return cls(start_time=slot.start_time, end_time=slot.end_time)


class AvailableSlotsResponse(BaseModel):
    doctor_id: str
    date: str
    duration: int | None = None
    slots: list[AvailableSlotResponse]


class MessageResponse(BaseModel):
    message: str
    data: dict[str, Any] | None = None
