"""
Meetings SQLAlchemy Models
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from sqlalchemy.dialects.postgresql import JSONB

from app.database.base import Base, TimestampMixin


class MeetingRoomModel(Base, TimestampMixin):
    """SQLAlchemy model for MeetingRoom aggregate."""

    __tablename__ = "meeting_rooms"

    id = Column(String(36), primary_key=True)

    # Room identification
    room_id = Column(String(32), unique=True, nullable=False, index=True)
    room_name = Column(String(100), nullable=True)
    room_link = Column(String(500), nullable=True)
    access_code = Column(String(16), unique=True, nullable=False)
    password = Column(String(32), nullable=True)

    host_id = Column(String(64), nullable=False, index=True)
    appointment_id = Column(String(36), unique=True, nullable=False, index=True)

    # Meeting control
    is_active = Column(Boolean, default=False, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    is_recording = Column(Boolean, default=False, nullable=False)
    recording_id = Column(String(255), nullable=True)

    participants = Column(JSONB, default=list, nullable=False)
    chat_history = Column(JSON, default=list, nullable=False)
    settings = Column(JSON, default=dict, nullable=False)

    # Statistics
    total_duration = Column(Integer, nullable=True)
    peak_participants = Column(Integer, default=0, nullable=False)

    version = Column(Integer, default=0, nullable=False)
