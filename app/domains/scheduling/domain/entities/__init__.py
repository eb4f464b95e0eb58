"""
Scheduling Domain Entities
"""

from .appointment import DEFAULT_CANCELLATION_REASON, Appointment
from .doctor import Doctor
from .organization import Organization
from .patient import Patient

__all__ = [
    "Appointment",
    "DEFAULT_CANCELLATION_REASON",
    "Doctor",
    "Organization",
    "Patient",
]
