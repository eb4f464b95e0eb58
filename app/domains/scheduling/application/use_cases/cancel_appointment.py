"""
Cancel Appointment Use Case
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from app.core.domain import AuthorizationException

from ...domain.entities.appointment import Appointment
from ..ports.appointment_repository import IAppointmentRepository
from ..ports.directory_repository import IDoctorRepository
from ..services.appointment_side_effects import AppointmentSideEffects
from ._lookup import get_appointment_or_raise

logger = logging.getLogger(__name__)


@dataclass
class CancelAppointmentRequest:
    appointment_id: str
    requester_id: str
    reason: str | None = None


class CancelAppointmentUseCase:
    """
    Use case for cancelling appointments.

    Cancellation is terminal and is the only way an appointment leaves the
    calendar; rows are never deleted.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        doctor_repository: IDoctorRepository,
        side_effects: AppointmentSideEffects,
        clock: Callable[[], datetime] | None = None,
    ):
        self.appointment_repo = appointment_repository
        self.doctor_repo = doctor_repository
        self.side_effects = side_effects
        self.clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, request: CancelAppointmentRequest) -> Appointment:
        """
        Execute cancellation.

        Raises:
            EntityNotFoundException: Appointment absent
            AuthorizationException: Requester is not the creator
            InvalidOperationException: Appointment already in a terminal state
            ConcurrencyException: Appointment changed after it was read
        """
        appointment = await get_appointment_or_raise(self.appointment_repo, request.appointment_id)

        if not appointment.is_creator(request.requester_id):
            logger.warning(f"User {request.requester_id} attempted to cancel appointment {appointment.id}")
            raise AuthorizationException(
                operation="cancel",
                resource=f"appointment:{appointment.id}",
                user_id=request.requester_id,
            )

        appointment.cancel(reason=request.reason, now=self.clock())
        events = appointment.pull_domain_events()
        saved = await self.appointment_repo.save(appointment)

        logger.info(f"Appointment cancelled: {saved.id} reason={saved.cancellation_reason!r}")

        self.side_effects.announce_cancellation(saved)
        if saved.calendar is not None:
            doctor = await self.doctor_repo.get_by_id(saved.doctor_id)
            await self.side_effects.delete_calendar_event(saved, doctor)
        self.side_effects.publish(events)

        return saved
