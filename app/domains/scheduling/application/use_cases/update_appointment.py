"""
Update Appointment Use Case

Edits an appointment and, when its time changes, re-validates that the
doctor is not double-booked.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from app.core.domain import (
    AppointmentConflictException,
    AuthorizationException,
    ValidationException,
)
from app.core.shared import KeyedLock

from ...domain.entities.appointment import Appointment
from ...domain.value_objects.appointment_status import AppointmentStatus
from ..ports.appointment_repository import IAppointmentRepository
from ..ports.directory_repository import IDoctorRepository
from ..services.appointment_side_effects import AppointmentSideEffects
from ._lookup import get_appointment_or_raise

logger = logging.getLogger(__name__)


@dataclass
class UpdateAppointmentRequest:
    """Request for updating an appointment. None means 'leave unchanged'."""

    appointment_id: str
    requester_id: str
    title: str | None = None
    description: str | None = None
    notes: str | None = None
    location: str | None = None
    start_time: datetime | None = None
    duration_minutes: int | None = None
    status: str | None = None

    @property
    def changes_time(self) -> bool:
        return self.start_time is not None or self.duration_minutes is not None


class UpdateAppointmentUseCase:
    """
    Use case for updating appointments.

    Only the creator may update. The whole read-modify-write runs under the
    doctor's schedule lock so a reschedule cannot race a concurrent create.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        doctor_repository: IDoctorRepository,
        side_effects: AppointmentSideEffects,
        schedule_lock: KeyedLock,
        clock: Callable[[], datetime] | None = None,
    ):
        self.appointment_repo = appointment_repository
        self.doctor_repo = doctor_repository
        self.side_effects = side_effects
        self.schedule_lock = schedule_lock
        self.clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, request: UpdateAppointmentRequest) -> Appointment:
        """
        Execute appointment update.

        Raises:
            EntityNotFoundException: Appointment absent
            AuthorizationException: Requester is not the creator
            ValidationException: Malformed field values
            InvalidOperationException: Appointment is in a terminal state
            AppointmentConflictException: New window overlaps another booking
            ConcurrencyException: Appointment changed after it was read
        """
        new_status = self._parse_status(request.status)

        appointment = await get_appointment_or_raise(self.appointment_repo, request.appointment_id)
        self._authorize(appointment, request.requester_id)

        async with self.schedule_lock.hold(appointment.doctor_id):
            if request.changes_time:
                await self.appointment_repo.lock_doctor_schedule(appointment.doctor_id)
                appointment = await get_appointment_or_raise(self.appointment_repo, request.appointment_id)

            changed = appointment.revise(
                title=request.title,
                description=request.description,
                notes=request.notes,
                location=request.location,
            )

            time_changed = False
            if request.changes_time:
                time_changed = appointment.reschedule(request.start_time, request.duration_minutes)
                if time_changed:
                    conflicts = await self.appointment_repo.find_conflicts(
                        appointment.doctor_id,
                        appointment.window,
                        exclude_appointment_id=appointment.id,
                    )
                    if conflicts:
                        logger.warning(
                            f"Rejected reschedule of {appointment.id} to {appointment.window}: "
                            f"overlaps {[c.id for c in conflicts]}"
                        )
                        raise AppointmentConflictException(
                            doctor_id=appointment.doctor_id,
                            time_slot=str(appointment.window),
                            conflicting_ids=[str(c.id) for c in conflicts],
                            message="Conflicting appointment exists",
                        )
                    changed.extend(["start_time", "duration_minutes", "end_time"])

            if new_status is not None and appointment.change_status(new_status):
                changed.append("status")

            if not changed:
                return appointment

            appointment.record_update(changed, now=self.clock())
            events = appointment.pull_domain_events()
            saved = await self.appointment_repo.save(appointment)

        logger.info(f"Appointment updated: {saved.id} fields={changed}")

        if time_changed and saved.calendar is not None:
            doctor = await self.doctor_repo.get_by_id(saved.doctor_id)
            await self.side_effects.update_calendar_event(saved, doctor)
        self.side_effects.publish(events)

        return saved

    @staticmethod
    def _parse_status(value: str | None) -> AppointmentStatus | None:
        if value is None:
            return None
        try:
            status = AppointmentStatus.from_string(value)
        except ValueError as e:
            raise ValidationException(str(e), field="status") from e
        if status == AppointmentStatus.CANCELLED:
            raise ValidationException("Use the cancel operation to cancel an appointment", field="status")
        return status

    @staticmethod
    def _authorize(appointment: Appointment, requester_id: str) -> None:
        if not appointment.is_creator(requester_id):
            logger.warning(f"User {requester_id} attempted to update appointment {appointment.id}")
            raise AuthorizationException(
                operation="update", resource=f"appointment:{appointment.id}", user_id=requester_id
            )
