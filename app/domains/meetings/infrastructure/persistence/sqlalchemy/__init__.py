"""
Meetings SQLAlchemy Persistence
"""

from .models import MeetingRoomModel

__all__ = ["MeetingRoomModel"]
