"""
Appointment Repository Implementation

SQLAlchemy implementation of IAppointmentRepository.
"""

import logging
from datetime import datetime

from typing import Any

from sqlalchemy import or_, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException
from app.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from app.domains.scheduling.domain.entities.appointment import Appointment
from app.domains.scheduling.domain.value_objects.appointment_details import (
    InPersonDetails,
    MeetingRoomBinding,
    PhoneDetails,
    VirtualDetails,
)
from app.domains.scheduling.domain.value_objects.appointment_status import (
    AppointmentStatus,
    AppointmentType,
)
from app.domains.scheduling.domain.value_objects.calendar import CalendarBinding, ReminderFlags
from app.domains.scheduling.domain.value_objects.participant import Participant
from app.domains.scheduling.domain.value_objects.time_window import TimeWindow
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import AppointmentModel

logger = logging.getLogger(__name__)

_ACTIVE_STATUSES = [AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED]


class SQLAlchemyAppointmentRepository(IAppointmentRepository):
    """
    SQLAlchemy implementation of appointment repository.

    ``save`` commits the session, which also releases the advisory lock
    taken by ``lock_doctor_schedule`` and persists any meeting room flushed
    earlier in the same session.

    Updates are guarded by the version the aggregate was loaded with: a
    writer holding an older copy (an accept racing a cancel, a reminder
    sweep racing an update) matches no row and gets ConcurrencyException
    instead of writing stale columns back. Version 0 means never persisted.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, appointment_id: str) -> Appointment | None:
        """Find appointment by ID."""
        model = await self.session.get(AppointmentModel, appointment_id)
        return self._to_entity(model) if model else None

    async def save(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment or update it if nobody wrote it since it was read."""
        expected_version = appointment.version
        appointment.increment_version()

        if expected_version == 0:
            model = self._to_model(appointment)
            self.session.add(model)
            await self.session.commit()
            await self.session.refresh(model)
            return self._to_entity(model)

        result = await self.session.execute(
            update(AppointmentModel)
            .where(
                AppointmentModel.id == appointment.id,
                AppointmentModel.version == expected_version,
            )
            .values(**self._column_values(appointment))
        )
        if result.rowcount != 1:
            await self.session.rollback()
            appointment.version = expected_version
            logger.warning(f"Stale write rejected for appointment {appointment.id} (version {expected_version})")
            raise ConcurrencyException("Appointment", appointment.id, expected_version)

        await self.session.commit()
        return appointment

    async def lock_doctor_schedule(self, doctor_id: str) -> None:
        """Take a transaction-scoped advisory lock keyed by the doctor."""
        await self.session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:doctor_id))"),
            {"doctor_id": doctor_id},
        )

    async def find_conflicts(
        self,
        doctor_id: str,
        window: TimeWindow,
        exclude_appointment_id: str | None = None,
    ) -> list[Appointment]:
        """Find overlapping, non-cancelled appointments of a doctor."""
        query = select(AppointmentModel).where(
            AppointmentModel.doctor_id == doctor_id,
            AppointmentModel.status != AppointmentStatus.CANCELLED,
            # Same half-open overlap rule as TimeWindow.overlaps
            AppointmentModel.start_time < window.end,
            AppointmentModel.end_time > window.start,
        )
        if exclude_appointment_id:
            query = query.where(AppointmentModel.id != exclude_appointment_id)

        result = await self.session.execute(query.order_by(AppointmentModel.start_time))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_doctor_in_window(self, doctor_id: str, window: TimeWindow) -> list[Appointment]:
        """Find a doctor's booked appointments intersecting a window."""
        result = await self.session.execute(
            select(AppointmentModel)
            .where(
                AppointmentModel.doctor_id == doctor_id,
                AppointmentModel.status != AppointmentStatus.CANCELLED,
                AppointmentModel.start_time < window.end,
                AppointmentModel.end_time > window.start,
            )
            .order_by(AppointmentModel.start_time)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_for_user(
        self,
        user_id: str,
        status: AppointmentStatus | None = None,
        appointment_type: AppointmentType | None = None,
        start_from: datetime | None = None,
        start_until: datetime | None = None,
    ) -> list[Appointment]:
        """Find appointments a user created or participates in."""
        query = select(AppointmentModel).where(
            or_(
                AppointmentModel.created_by == user_id,
                AppointmentModel.participants.contains([{"user_id": user_id}]),
            )
        )

        if status:
            query = query.where(AppointmentModel.status == status)
        if appointment_type:
            query = query.where(AppointmentModel.appointment_type == appointment_type)
        if start_from:
            query = query.where(AppointmentModel.start_time >= start_from)
        if start_until:
            query = query.where(AppointmentModel.start_time <= start_until)

        result = await self.session.execute(query.order_by(AppointmentModel.start_time))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_needing_reminder(self, start_from: datetime, start_until: datetime) -> list[Appointment]:
        """Find active appointments in range whose e-mail reminder is pending."""
        result = await self.session.execute(
            select(AppointmentModel)
            .where(
                AppointmentModel.reminder_email_sent.is_(False),
                AppointmentModel.status.in_(_ACTIVE_STATUSES),
                AppointmentModel.start_time >= start_from,
                AppointmentModel.start_time <= start_until,
            )
            .order_by(AppointmentModel.start_time)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    # Mapping methods

    def _to_entity(self, model: AppointmentModel) -> Appointment:
        """Convert model to entity."""
        calendar = None
        if model.calendar_event_id:
            calendar = CalendarBinding(
                external_event_id=model.calendar_event_id,  # type: ignore[arg-type]
                external_event_link=model.calendar_event_link,  # type: ignore[arg-type]
            )

        return Appointment(
            id=model.id,  # type: ignore[arg-type]
            title=model.title,  # type: ignore[arg-type]
            description=model.description,  # type: ignore[arg-type]
            notes=model.notes,  # type: ignore[arg-type]
            doctor_id=model.doctor_id,  # type: ignore[arg-type]
            patient_id=model.patient_id,  # type: ignore[arg-type]
            organization_id=model.organization_id,  # type: ignore[arg-type]
            created_by=model.created_by,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            duration_minutes=model.duration_minutes,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            timezone=model.timezone or "UTC",  # type: ignore[arg-type]
            status=model.status or AppointmentStatus.SCHEDULED,  # type: ignore[arg-type]
            details=self._details_from_model(model),
            participants=[Participant.from_dict(p) for p in (model.participants or [])],
            calendar=calendar,
            reminders=ReminderFlags(
                email=bool(model.reminder_email_sent),
                sms=bool(model.reminder_sms_sent),
            ),
            cancellation_reason=model.cancellation_reason,  # type: ignore[arg-type]
            cancelled_at=model.cancelled_at,  # type: ignore[arg-type]
            version=model.version or 0,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    @staticmethod
    def _details_from_model(model: AppointmentModel):
        if model.appointment_type == AppointmentType.VIRTUAL:
            return VirtualDetails(
                room=MeetingRoomBinding(
                    room_id=model.room_id,  # type: ignore[arg-type]
                    room_link=model.room_link or "",  # type: ignore[arg-type]
                    access_code=model.access_code,  # type: ignore[arg-type]
                    password=model.room_password,  # type: ignore[arg-type]
                )
            )
        if model.appointment_type == AppointmentType.PHONE:
            return PhoneDetails()
        return InPersonDetails(location=model.location)  # type: ignore[arg-type]

    def _to_model(self, appointment: Appointment) -> AppointmentModel:
        """Convert entity to model."""
        return AppointmentModel(
            id=appointment.id,
            created_at=appointment.created_at,
            **self._column_values(appointment),
        )

    @staticmethod
    def _column_values(appointment: Appointment) -> dict[str, Any]:
        """Mutable columns of an appointment row, shared by insert and guarded update."""
        details = appointment.details
        room = details.room if isinstance(details, VirtualDetails) else None
        calendar = appointment.calendar
        return {
            "title": appointment.title,
            "description": appointment.description,
            "notes": appointment.notes,
            "doctor_id": appointment.doctor_id,
            "patient_id": appointment.patient_id,
            "organization_id": appointment.organization_id,
            "created_by": appointment.created_by,
            "start_time": appointment.start_time,
            "end_time": appointment.end_time,
            "duration_minutes": appointment.duration_minutes,
            "timezone": appointment.timezone,
            "status": appointment.status,
            "appointment_type": appointment.appointment_type,
            "location": details.location if isinstance(details, InPersonDetails) else None,
            "room_id": room.room_id if room else None,
            "room_link": room.room_link if room else None,
            "access_code": room.access_code if room else None,
            "room_password": room.password if room else None,
            "participants": [p.to_dict() for p in appointment.participants],
            "calendar_event_id": calendar.external_event_id if calendar else None,
            "calendar_event_link": calendar.external_event_link if calendar else None,
            "reminder_email_sent": appointment.reminders.email,
            "reminder_sms_sent": appointment.reminders.sms,
            "cancellation_reason": appointment.cancellation_reason,
            "cancelled_at": appointment.cancelled_at,
            "version": appointment.version,
            "updated_at": appointment.updated_at,
        }
