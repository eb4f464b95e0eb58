"""
Lookup helpers shared by the scheduling use cases.
"""

from app.core.domain import EntityNotFoundException

from ...domain.entities.appointment import Appointment
from ..ports.appointment_repository import IAppointmentRepository


async def get_appointment_or_raise(repository: IAppointmentRepository, appointment_id: str) -> Appointment:
    appointment = await repository.get_by_id(appointment_id)
    if appointment is None:
        raise EntityNotFoundException(entity_type="Appointment", entity_id=appointment_id)
    return appointment
