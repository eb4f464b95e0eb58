"""
Appointment Repository Port

Interface for appointment persistence.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ...domain.entities.appointment import Appointment
from ...domain.value_objects.appointment_status import AppointmentStatus, AppointmentType
from ...domain.value_objects.time_window import TimeWindow


@runtime_checkable
class IAppointmentRepository(Protocol):
    """
    Interface for appointment repository.

    Cancelled appointments are never returned by the conflict and window
    queries; they no longer occupy the doctor's calendar.
    """

    async def get_by_id(self, appointment_id: str) -> Appointment | None:
        """
        Get appointment by ID.

        Args:
            appointment_id: Appointment ID

        Returns:
            Appointment if found, None otherwise
        """
        ...

    async def save(self, appointment: Appointment) -> Appointment:
        """
        Insert or update an appointment in a single atomic write.

        Args:
            appointment: Appointment to persist

        Returns:
            The persisted appointment
        """
        ...

    async def lock_doctor_schedule(self, doctor_id: str) -> None:
        """
        Serialize schedule writes for a doctor until the current transaction ends.

        Args:
            doctor_id: Doctor whose schedule is about to be checked and written
        """
        ...

    async def find_conflicts(
        self,
        doctor_id: str,
        window: TimeWindow,
        exclude_appointment_id: str | None = None,
    ) -> list[Appointment]:
        """
        Find non-cancelled appointments of a doctor overlapping a window.

        Args:
            doctor_id: Doctor ID
            window: Requested [start, end) window
            exclude_appointment_id: Appointment to ignore (when rescheduling)

        Returns:
            Overlapping appointments
        """
        ...

    async def find_by_doctor_in_window(self, doctor_id: str, window: TimeWindow) -> list[Appointment]:
        """
        Get a doctor's non-cancelled appointments intersecting a window, ordered by start.

        Args:
            doctor_id: Doctor ID
            window: Search window

        Returns:
            Booked appointments
        """
        ...

    async def find_for_user(
        self,
        user_id: str,
        status: AppointmentStatus | None = None,
        appointment_type: AppointmentType | None = None,
        start_from: datetime | None = None,
        start_until: datetime | None = None,
    ) -> list[Appointment]:
        """
        Get appointments a user created or participates in, ordered by start ascending.

        Args:
            user_id: User ID
            status: Optional status filter
            appointment_type: Optional type filter
            start_from: Optional inclusive lower bound on start time
            start_until: Optional inclusive upper bound on start time

        Returns:
            Matching appointments
        """
        ...

    async def find_needing_reminder(self, start_from: datetime, start_until: datetime) -> list[Appointment]:
        """
        Get active appointments starting in a range whose e-mail reminder is still pending.

        Args:
            start_from: Inclusive lower bound on start time
            start_until: Inclusive upper bound on start time

        Returns:
            Appointments to remind
        """
        ...
