"""
Meetings Infrastructure Repositories
"""

from app.domains.meetings.infrastructure.repositories.meeting_room_repository import (
    SQLAlchemyMeetingRoomRepository,
)

__all__ = ["SQLAlchemyMeetingRoomRepository"]
