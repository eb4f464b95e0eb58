"""
Meetings API Dependencies
"""

from app.api.dependencies import Container, DbSession
from app.domains.meetings.application.services import MeetingRoomManager


def get_meeting_room_manager(db: DbSession, container: Container) -> MeetingRoomManager:
    """Get MeetingRoomManager instance with database session."""
    return container.create_meeting_room_manager(db)


__all__ = ["get_meeting_room_manager"]
