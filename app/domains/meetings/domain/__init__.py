"""
Meetings Domain Layer

Meeting rooms bound to virtual appointments.
"""

from .entities import ChatMessage, MeetingRoom, RoomParticipant
from .services import MeetingRoomPolicy
from .value_objects import RoomCredentials, RoomRole, RoomSettings

__all__ = [
    "ChatMessage",
    "MeetingRoom",
    "MeetingRoomPolicy",
    "RoomCredentials",
    "RoomParticipant",
    "RoomRole",
    "RoomSettings",
]
