"""
Appointment Side Effects

Notification, calendar and realtime work that follows a committed
appointment change. Every call is best-effort: failures are logged by the
SideEffectRunner and never reach the caller.
"""

import logging
from collections.abc import Sequence
from typing import Any

from app.core.domain import DomainEvent
from app.core.shared import SideEffectRunner

from ...domain.entities.appointment import Appointment
from ...domain.entities.doctor import Doctor
from ...domain.value_objects.appointment_details import InPersonDetails, VirtualDetails
from ...domain.value_objects.calendar import CalendarBinding
from ..ports.calendar_port import CalendarEventData, ICalendarSync
from ..ports.event_publisher_port import IAppointmentEventPublisher
from ..ports.notification_port import INotificationDispatcher, Recipient, TemplateKind

logger = logging.getLogger(__name__)


class AppointmentSideEffects:
    """
    Application service bundling the external collaborators of the scheduler.

    Notifications and realtime events run in the background; calendar calls
    are awaited because their result is stored on the appointment.
    """

    def __init__(
        self,
        notifier: INotificationDispatcher,
        calendar: ICalendarSync,
        publisher: IAppointmentEventPublisher,
        runner: SideEffectRunner,
        frontend_url: str = "",
        calendar_enabled: bool = True,
    ):
        self._notifier = notifier
        self._calendar = calendar
        self._publisher = publisher
        self._runner = runner
        self._frontend_url = frontend_url.rstrip("/")
        self._calendar_enabled = calendar_enabled

    # ==================== NOTIFICATIONS ====================

    def invite(self, appointment: Appointment) -> None:
        data = {
            **self._appointment_data(appointment),
            "acceptLink": f"{self._frontend_url}/appointments/{appointment.id}/accept",
            "declineLink": f"{self._frontend_url}/appointments/{appointment.id}/decline",
        }
        self._notify(appointment, TemplateKind.INVITATION, data)

    def announce_cancellation(self, appointment: Appointment) -> None:
        data = {
            "title": appointment.title,
            "startTime": appointment.start_time.isoformat() if appointment.start_time else None,
            "reason": appointment.cancellation_reason,
        }
        self._notify(appointment, TemplateKind.CANCELLATION, data)

    async def remind(self, appointment: Appointment) -> None:
        recipients = self._recipients(appointment)
        if not recipients:
            return
        await self._runner.run(
            f"reminder:{appointment.id}",
            self._notifier.send_batch(recipients, TemplateKind.REMINDER, self._appointment_data(appointment)),
        )

    def _notify(self, appointment: Appointment, kind: str, data: dict[str, Any]) -> None:
        recipients = self._recipients(appointment)
        if not recipients:
            logger.info(f"No e-mail recipients for {kind} of appointment {appointment.id}")
            return
        self._runner.fire(f"{kind}:{appointment.id}", self._notifier.send_batch(recipients, kind, data))

    @staticmethod
    def _recipients(appointment: Appointment) -> list[Recipient]:
        return [Recipient(email=p.email, name=p.name) for p in appointment.participants if p.email]

    @staticmethod
    def _appointment_data(appointment: Appointment) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": appointment.title,
            "description": appointment.description,
            "appointmentType": appointment.appointment_type.value,
            "startTime": appointment.start_time.isoformat() if appointment.start_time else None,
            "duration": appointment.duration_minutes,
            "timezone": appointment.timezone,
        }
        if isinstance(appointment.details, InPersonDetails):
            data["location"] = appointment.details.location
        if isinstance(appointment.details, VirtualDetails):
            room = appointment.details.room
            data.update(meetingLink=room.room_link, accessCode=room.access_code, password=room.password)
        return data

    # ==================== CALENDAR ====================

    def _calendar_usable(self, doctor: Doctor | None) -> bool:
        if not self._calendar_enabled:
            logger.info("Calendar sync disabled, skipping")
            return False
        if doctor is None or doctor.calendar_account is None:
            logger.info("Doctor has no connected calendar, skipping sync")
            return False
        return True

    async def create_calendar_event(self, appointment: Appointment, doctor: Doctor) -> CalendarBinding | None:
        if not self._calendar_usable(doctor):
            return None
        binding = await self._runner.run(
            f"calendar-create:{appointment.id}",
            self._calendar.create_event(doctor.calendar_account, self._event_data(appointment)),
        )
        if binding is not None:
            logger.info(f"Appointment {appointment.id} synced to calendar event {binding.external_event_id}")
        return binding

    async def update_calendar_event(self, appointment: Appointment, doctor: Doctor | None) -> bool:
        if appointment.calendar is None or not self._calendar_usable(doctor):
            return False
        binding = await self._runner.run(
            f"calendar-update:{appointment.id}",
            self._calendar.update_event(
                doctor.calendar_account,
                appointment.calendar.external_event_id,
                self._event_data(appointment),
            ),
        )
        return binding is not None

    async def delete_calendar_event(self, appointment: Appointment, doctor: Doctor | None) -> bool:
        if appointment.calendar is None or not self._calendar_usable(doctor):
            return False
        await self._runner.run(
            f"calendar-delete:{appointment.id}",
            self._calendar.delete_event(doctor.calendar_account, appointment.calendar.external_event_id),
        )
        return True

    @staticmethod
    def _event_data(appointment: Appointment) -> CalendarEventData:
        location = appointment.details.location if isinstance(appointment.details, InPersonDetails) else None
        if isinstance(appointment.details, VirtualDetails):
            location = appointment.details.room.room_link
        return CalendarEventData(
            title=appointment.title,
            description=appointment.description,
            start_time=appointment.window.start,
            end_time=appointment.window.end,
            timezone=appointment.timezone,
            location=location,
            attendees=tuple(p.email for p in appointment.participants if p.email),
        )

    # ==================== REALTIME ====================

    def publish(self, events: Sequence[DomainEvent]) -> None:
        if not events:
            return
        self._runner.fire("realtime-appointments", self._publisher.publish(list(events)))
