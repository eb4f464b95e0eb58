"""baseline

Revision ID: 001_baseline
Revises:
Create Date: 2026-09-28

Creates the directory, appointment and meeting room tables.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_baseline"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create scheduling and meetings tables."""

    # ==========================================================================
    # 1. Directory
    # ==========================================================================
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "doctors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("specialization", sa.String(100), nullable=True),
        sa.Column("organization_ids", sa.JSON(), nullable=True),
        sa.Column("calendar_id", sa.String(255), nullable=True),
        sa.Column("calendar_access_token", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_doctors_user_id", "doctors", ["user_id"], unique=True)

    op.create_table(
        "patients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_patients_user_id", "patients", ["user_id"], unique=True)

    # ==========================================================================
    # 2. Appointments
    # ==========================================================================
    op.create_table(
        "appointments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("patient_id", sa.String(36), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("organization_id", sa.String(36), sa.ForeignKey("organizations.id"), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column(
            "status",
            sa.Enum("SCHEDULED", "CONFIRMED", "CANCELLED", "COMPLETED", "NO_SHOW", name="appointmentstatus"),
            nullable=False,
        ),
        sa.Column(
            "appointment_type",
            sa.Enum("IN_PERSON", "VIRTUAL", "PHONE", name="appointmenttype"),
            nullable=False,
        ),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("room_id", sa.String(32), nullable=True),
        sa.Column("room_link", sa.String(500), nullable=True),
        sa.Column("access_code", sa.String(16), nullable=True),
        sa.Column("room_password", sa.String(32), nullable=True),
        sa.Column("participants", JSONB(), nullable=False),
        sa.Column("calendar_event_id", sa.String(255), nullable=True),
        sa.Column("calendar_event_link", sa.String(500), nullable=True),
        sa.Column("reminder_email_sent", sa.Boolean(), nullable=False),
        sa.Column("reminder_sms_sent", sa.Boolean(), nullable=False),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_created_by", "appointments", ["created_by"])
    op.create_index("ix_appointments_start_time", "appointments", ["start_time"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appointments_doctor_window", "appointments", ["doctor_id", "start_time", "end_time"])

    # ==========================================================================
    # 3. Meeting rooms
    # ==========================================================================
    op.create_table(
        "meeting_rooms",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("room_id", sa.String(32), nullable=False),
        sa.Column("room_name", sa.String(100), nullable=True),
        sa.Column("room_link", sa.String(500), nullable=True),
        sa.Column("access_code", sa.String(16), nullable=False, unique=True),
        sa.Column("password", sa.String(32), nullable=True),
        sa.Column("host_id", sa.String(64), nullable=False),
        sa.Column("appointment_id", sa.String(36), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_recording", sa.Boolean(), nullable=False),
        sa.Column("recording_id", sa.String(255), nullable=True),
        sa.Column("participants", JSONB(), nullable=False),
        sa.Column("chat_history", sa.JSON(), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("total_duration", sa.Integer(), nullable=True),
        sa.Column("peak_participants", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_meeting_rooms_room_id", "meeting_rooms", ["room_id"], unique=True)
    op.create_index("ix_meeting_rooms_host_id", "meeting_rooms", ["host_id"])
    op.create_index("ix_meeting_rooms_appointment_id", "meeting_rooms", ["appointment_id"], unique=True)


def downgrade() -> None:
    """Drop scheduling and meetings tables."""
    op.drop_table("meeting_rooms")
    op.drop_table("appointments")
    op.drop_table("patients")
    op.drop_table("doctors")
    op.drop_table("organizations")
    sa.Enum(name="appointmenttype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="appointmentstatus").drop(op.get_bind(), checkfirst=True)
