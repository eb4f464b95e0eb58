"""
Get Available Slots Use Case
"""

import logging
from dataclasses import dataclass
from datetime import date

from app.core.domain import EntityNotFoundException

from ...domain.services.availability_service import AvailabilityService, AvailableSlot
from ..ports.appointment_repository import IAppointmentRepository
from ..ports.directory_repository import IDoctorRepository

logger = logging.getLogger(__name__)


@dataclass
class GetAvailableSlotsRequest:
    doctor_id: str
    day: date
    duration_minutes: int | None = None


class GetAvailableSlotsUseCase:
    """
    Offer a doctor's free slots for a day.

    Advisory only: nothing is reserved, creation re-checks for conflicts.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        doctor_repository: IDoctorRepository,
        availability_service: AvailabilityService,
    ):
        self.appointment_repo = appointment_repository
        self.doctor_repo = doctor_repository
        self.availability = availability_service

    async def execute(self, request: GetAvailableSlotsRequest) -> list[AvailableSlot]:
        doctor = await self.doctor_repo.get_by_id(request.doctor_id)
        if doctor is None:
            raise EntityNotFoundException(entity_type="Doctor", entity_id=request.doctor_id)

        search_window = self.availability.search_window(request.day, request.duration_minutes)
        booked = await self.appointment_repo.find_by_doctor_in_window(str(doctor.id), search_window)

        slots = self.availability.available_slots(
            str(doctor.id),
            request.day,
            request.duration_minutes,
            [appointment.window for appointment in booked],
        )
        logger.debug(f"Doctor {doctor.id} on {request.day}: {len(slots)} free slots, {len(booked)} booked")
        return slots
