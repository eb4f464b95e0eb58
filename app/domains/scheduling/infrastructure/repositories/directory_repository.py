"""
Directory Repository Implementations

Read-only lookups of doctors, patients and organizations.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.scheduling.domain.entities.doctor import Doctor
from app.domains.scheduling.domain.entities.organization import Organization
from app.domains.scheduling.domain.entities.patient import Patient
from app.domains.scheduling.domain.value_objects.calendar import CalendarAccount
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    DoctorModel,
    OrganizationModel,
    PatientModel,
)


class SQLAlchemyDoctorRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, doctor_id: str) -> Doctor | None:
        model = await self.session.get(DoctorModel, doctor_id)
        return self._to_entity(model) if model else None

    def _to_entity(self, model: DoctorModel) -> Doctor:
        account = None
        if model.calendar_access_token:
            account = CalendarAccount(
                access_token=model.calendar_access_token,  # type: ignore[arg-type]
                calendar_id=model.calendar_id or "primary",  # type: ignore[arg-type]
            )
        return Doctor(
            id=model.id,  # type: ignore[arg-type]
            user_id=model.user_id,  # type: ignore[arg-type]
            first_name=model.first_name,  # type: ignore[arg-type]
            last_name=model.last_name,  # type: ignore[arg-type]
            email=model.email,  # type: ignore[arg-type]
            specialization=model.specialization,  # type: ignore[arg-type]
            calendar_account=account,
            organization_ids=list(model.organization_ids or []),
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )


class SQLAlchemyPatientRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, patient_id: str) -> Patient | None:
        model = await self.session.get(PatientModel, patient_id)
        if not model:
            return None
        return Patient(
            id=model.id,  # type: ignore[arg-type]
            user_id=model.user_id,  # type: ignore[arg-type]
            first_name=model.first_name,  # type: ignore[arg-type]
            last_name=model.last_name,  # type: ignore[arg-type]
            email=model.email,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )


class SQLAlchemyOrganizationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, organization_id: str) -> Organization | None:
        model = await self.session.get(OrganizationModel, organization_id)
        if not model:
            return None
        return Organization(
            id=model.id,  # type: ignore[arg-type]
            name=model.name,  # type: ignore[arg-type]
            email=model.email,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )
