"""
Scheduling Infrastructure Repositories

Repository implementations for the scheduling domain.
"""

from app.domains.scheduling.infrastructure.repositories.appointment_repository import (
    SQLAlchemyAppointmentRepository,
)
from app.domains.scheduling.infrastructure.repositories.directory_repository import (
    SQLAlchemyDoctorRepository,
    SQLAlchemyOrganizationRepository,
    SQLAlchemyPatientRepository,
)

__all__ = [
    "SQLAlchemyAppointmentRepository",
    "SQLAlchemyDoctorRepository",
    "SQLAlchemyOrganizationRepository",
    "SQLAlchemyPatientRepository",
]
