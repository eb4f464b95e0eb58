"""
Scheduling SQLAlchemy Persistence
"""

from .models import AppointmentModel, DoctorModel, OrganizationModel, PatientModel

__all__ = [
    "AppointmentModel",
    "DoctorModel",
    "OrganizationModel",
    "PatientModel",
]
