"""
Directory Repository Ports

Read-only access to the people and organizations appointments refer to.
"""

from typing import Protocol, runtime_checkable

from ...domain.entities.doctor import Doctor
from ...domain.entities.organization import Organization
from ...domain.entities.patient import Patient


@runtime_checkable
class IDoctorRepository(Protocol):
    async def get_by_id(self, doctor_id: str) -> Doctor | None:
        """Get doctor by ID, None if absent."""
        ...


@runtime_checkable
class IPatientRepository(Protocol):
    async def get_by_id(self, patient_id: str) -> Patient | None:
        """Get patient by ID, None if absent."""
        ...


@runtime_checkable
class IOrganizationRepository(Protocol):
    async def get_by_id(self, organization_id: str) -> Organization | None:
        """Get organization by ID, None if absent."""
        ...
