"""
Meetings Application Services
"""

from .meeting_room_manager import MeetingRoomManager

__all__ = ["MeetingRoomManager"]
