"""
Scheduling SQLAlchemy Models

Database models for scheduling persistence.
"""

from typing import Any

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB

from app.database.base import Base, TimestampMixin
from app.domains.scheduling.domain.value_objects.appointment_status import (
    AppointmentStatus,
    AppointmentType,
)


class OrganizationModel(Base, TimestampMixin):
    """SQLAlchemy model for Organization entity."""

    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)


class DoctorModel(Base, TimestampMixin):
    """SQLAlchemy model for Doctor entity."""

    __tablename__ = "doctors"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    specialization = Column(String(100), nullable=True)
    organization_ids = Column(JSON, default=list)

    # External calendar account
    calendar_id = Column(String(255), nullable=True)
    calendar_access_token = Column(Text, nullable=True)


class PatientModel(Base, TimestampMixin):
    """SQLAlchemy model for Patient entity."""

    __tablename__ = "patients"

    id = Column(String(36), primary_key=True)
    # Portal account, absent for staff-managed patients
    user_id = Column(String(64), nullable=True, unique=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)


class AppointmentModel(Base, TimestampMixin):
    """SQLAlchemy model for Appointment aggregate."""

    __tablename__ = "appointments"
    __table_args__ = (Index("ix_appointments_doctor_window", "doctor_id", "start_time", "end_time"),)

    id = Column(String(36), primary_key=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # References
    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False, index=True)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    created_by = Column(String(64), nullable=False, index=True)

    # Scheduling
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    timezone = Column(String(64), default="UTC", nullable=False)

    status = Column(
        SQLEnum(AppointmentStatus),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
        index=True,
    )
    appointment_type = Column(SQLEnum(AppointmentType), nullable=False)

    # In-person details
    location = Column(String(255), nullable=True)

    # Virtual details
    room_id = Column(String(32), nullable=True)
    room_link = Column(String(500), nullable=True)
    access_code = Column(String(16), nullable=True)
    room_password = Column(String(32), nullable=True)

    participants = Column(JSONB, default=list, nullable=False)

    # External calendar
    calendar_event_id = Column(String(255), nullable=True)
    calendar_event_link = Column(String(500), nullable=True)

    # Reminders
    reminder_email_sent = Column(Boolean, default=False, nullable=False)
    reminder_sms_sent = Column(Boolean, default=False, nullable=False)

    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, default=0, nullable=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "doctor_id": self.doctor_id,
            "patient_id": self.patient_id,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "status": self.status.value if self.status else None,
            "appointment_type": self.appointment_type.value if self.appointment_type else None,
        }
