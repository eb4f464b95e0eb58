"""
Meetings Domain Entities
"""

from .meeting_room import ChatMessage, MeetingRoom, RoomParticipant

__all__ = [
    "ChatMessage",
    "MeetingRoom",
    "RoomParticipant",
]
