"""
Get Appointment Use Case
"""

import logging
from dataclasses import dataclass

from app.core.domain import AuthorizationException

from ...domain.entities.appointment import Appointment
from ..ports.appointment_repository import IAppointmentRepository
from ._lookup import get_appointment_or_raise

logger = logging.getLogger(__name__)


@dataclass
class GetAppointmentRequest:
    appointment_id: str
    requester_id: str


class GetAppointmentUseCase:
    """Fetch one appointment; only its creator and participants may see it."""

    def __init__(self, appointment_repository: IAppointmentRepository):
        self.appointment_repo = appointment_repository

    async def execute(self, request: GetAppointmentRequest) -> Appointment:
        appointment = await get_appointment_or_raise(self.appointment_repo, request.appointment_id)
        if not appointment.can_be_viewed_by(request.requester_id):
            logger.warning(f"User {request.requester_id} denied access to appointment {appointment.id}")
            raise AuthorizationException(
                operation="view",
                resource=f"appointment:{appointment.id}",
                user_id=request.requester_id,
            )
        return appointment
