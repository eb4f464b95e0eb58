"""
Meetings Domain Services
"""

from .meeting_policy import MeetingRoomPolicy

__all__ = ["MeetingRoomPolicy"]
