"""
Meetings Domain Value Objects
"""

from .room_settings import (
    ACCESS_CODE_ALPHABET,
    ACCESS_CODE_LENGTH,
    ROOM_ID_PREFIX,
    RoomCredentials,
    RoomRole,
    RoomSettings,
)

__all__ = [
    "ACCESS_CODE_ALPHABET",
    "ACCESS_CODE_LENGTH",
    "ROOM_ID_PREFIX",
    "RoomCredentials",
    "RoomRole",
    "RoomSettings",
]
