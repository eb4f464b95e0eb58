"""
Respond To Invitation Use Case

Accept or decline an appointment invitation.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from app.core.domain import ValidationException

from ...domain.entities.appointment import Appointment
from ...domain.value_objects.appointment_status import InvitationResponse
from ..ports.appointment_repository import IAppointmentRepository
from ..services.appointment_side_effects import AppointmentSideEffects
from ._lookup import get_appointment_or_raise

logger = logging.getLogger(__name__)


@dataclass
class RespondToInvitationRequest:
    appointment_id: str
    requester_id: str
    response: str


class RespondToInvitationUseCase:
    """
    Use case for accepting or declining an invitation.

    A requester who is not a participant gets the appointment back unchanged,
    and repeating the same answer does not write anything. A response read
    before a concurrent cancel or update fails with ConcurrencyException.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        side_effects: AppointmentSideEffects,
        clock: Callable[[], datetime] | None = None,
    ):
        self.appointment_repo = appointment_repository
        self.side_effects = side_effects
        self.clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, request: RespondToInvitationRequest) -> Appointment:
        try:
            response = InvitationResponse.from_string(request.response)
        except ValueError as e:
            raise ValidationException(str(e), field="response") from e

        appointment = await get_appointment_or_raise(self.appointment_repo, request.appointment_id)

        if not appointment.respond(request.requester_id, response, now=self.clock()):
            logger.info(
                f"Invitation response '{response.value}' by {request.requester_id} "
                f"left appointment {appointment.id} unchanged"
            )
            return appointment

        events = appointment.pull_domain_events()
        saved = await self.appointment_repo.save(appointment)
        logger.info(f"User {request.requester_id} responded '{response.value}' to appointment {saved.id}")

        self.side_effects.publish(events)
        return saved
