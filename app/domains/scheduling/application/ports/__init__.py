"""
Scheduling Application Ports

Interfaces the scheduling use cases depend on.
"""

from .appointment_repository import IAppointmentRepository
from .calendar_port import CalendarEventData, ICalendarSync
from .directory_repository import IDoctorRepository, IOrganizationRepository, IPatientRepository
from .event_publisher_port import IAppointmentEventPublisher
from .meeting_room_port import IMeetingRoomProvisioner
from .notification_port import INotificationDispatcher, Recipient, TemplateKind

__all__ = [
    "CalendarEventData",
    "IAppointmentEventPublisher",
    "IAppointmentRepository",
    "ICalendarSync",
    "IDoctorRepository",
    "IMeetingRoomProvisioner",
    "INotificationDispatcher",
    "IOrganizationRepository",
    "IPatientRepository",
    "Recipient",
    "TemplateKind",
]
