"""
List User Appointments Use Case
"""

from dataclasses import dataclass
from datetime import datetime

from app.core.domain import ValidationException

from ...domain.entities.appointment import Appointment
from ...domain.value_objects.appointment_status import AppointmentStatus, AppointmentType
from ...domain.value_objects.time_window import ensure_utc
from ..ports.appointment_repository import IAppointmentRepository


@dataclass
class ListUserAppointmentsRequest:
    """Filters for the user's appointments. All are optional."""

    user_id: str
    status: str | None = None
    appointment_type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class ListUserAppointmentsUseCase:
    """
    Appointments a user created or participates in, oldest start first.
    """

    def __init__(self, appointment_repository: IAppointmentRepository):
        self.appointment_repo = appointment_repository

    async def execute(self, request: ListUserAppointmentsRequest) -> list[Appointment]:
        status = self._parse(AppointmentStatus, request.status, "status")
        appointment_type = self._parse(AppointmentType, request.appointment_type, "type")
        start_from = ensure_utc(request.start_date) if request.start_date else None
        start_until = ensure_utc(request.end_date) if request.end_date else None
        if start_from and start_until and start_from > start_until:
            raise ValidationException("start_date must not be after end_date", field="start_date")

        appointments = await self.appointment_repo.find_for_user(
            request.user_id,
            status=status,
            appointment_type=appointment_type,
            start_from=start_from,
            start_until=start_until,
        )
        return sorted(appointments, key=lambda a: a.start_time)

    @staticmethod
    def _parse(enum_cls, value: str | None, field: str):
        if value is None:
            return None
        try:
            return enum_cls.from_string(value)
        except ValueError as e:
            raise ValidationException(str(e), field=field) from e
