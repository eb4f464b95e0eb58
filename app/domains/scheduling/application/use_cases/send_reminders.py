"""
Send Appointment Reminders Use Case

Reminds participants of appointments starting soon, at most once per
appointment and channel.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from app.core.domain import ConcurrencyException

from ...domain.entities.appointment import Appointment
from ..ports.appointment_repository import IAppointmentRepository
from ..services.appointment_side_effects import AppointmentSideEffects

logger = logging.getLogger(__name__)


class SendAppointmentRemindersUseCase:
    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        side_effects: AppointmentSideEffects,
        lead_minutes: int = 60,
        clock: Callable[[], datetime] | None = None,
    ):
        self.appointment_repo = appointment_repository
        self.side_effects = side_effects
        self.lead = timedelta(minutes=lead_minutes)
        self.clock = clock or (lambda: datetime.now(UTC))

    async def execute(self) -> list[Appointment]:
        """
        Send due reminders.

        Returns:
            Appointments that were reminded in this run
        """
        now = self.clock()
        candidates = await self.appointment_repo.find_needing_reminder(now, now + self.lead)

        reminded: list[Appointment] = []
        for appointment in candidates:
            if not appointment.needs_reminder(now, self.lead):
                continue
            appointment.mark_reminder_sent("email")
            events = appointment.pull_domain_events()
            try:
                saved = await self.appointment_repo.save(appointment)
            except ConcurrencyException:
                # Cancelled or rescheduled after the sweep read it
                logger.info(f"Skipping reminder for appointment {appointment.id}: modified concurrently")
                continue

            await self.side_effects.remind(saved)
            self.side_effects.publish(events)
            reminded.append(saved)

        if reminded:
            logger.info(f"Sent reminders for {len(reminded)} appointments")
        return reminded
