"""
Scheduling Domain Layer

Entities, value objects, events and domain services for appointment
scheduling. Free of I/O.
"""

from .entities import Appointment, Doctor, Organization, Patient
from .services import AvailabilityService, AvailableSlot, WorkingHours

__all__ = [
    "Appointment",
    "AvailabilityService",
    "AvailableSlot",
    "Doctor",
    "Organization",
    "Patient",
    "WorkingHours",
]
