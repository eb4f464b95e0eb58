"""
Meeting Room Value Objects
"""

import secrets
import string
from dataclasses import dataclass
from typing import Any

from app.core.domain import StatusEnum, ValueObject

ROOM_ID_PREFIX = "room-"
ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_CODE_LENGTH = 10


class RoomRole(StatusEnum):
    """Role of a participant inside a meeting room."""

    HOST = "host"
    CO_HOST = "co-host"
    PARTICIPANT = "participant"
    OBSERVER = "observer"


@dataclass(frozen=True)
class RoomSettings(ValueObject):
    max_participants: int = 100
    allow_recording: bool = True
    waiting_room_enabled: bool = False
    screen_share_enabled: bool = True
    chat_enabled: bool = True

    def _validate(self) -> None:
        if self.max_participants < 1:
            raise ValueError("max_participants must be at least 1")

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_participants": self.max_participants,
            "allow_recording": self.allow_recording,
            "waiting_room_enabled": self.waiting_room_enabled,
            "screen_share_enabled": self.screen_share_enabled,
            "chat_enabled": self.chat_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RoomSettings":
        if not data:
            return cls()
        return cls(**{key: value for key, value in data.items() if key in cls.__dataclass_fields__})


@dataclass(frozen=True)
class RoomCredentials(ValueObject):
    """
    Shareable identifiers of a room.

    room_id carries 64 random bits, access_code about 51 and password 48.
    """

    room_id: str
    access_code: str
    password: str

    @classmethod
    def generate(cls) -> "RoomCredentials":
        return cls(
            room_id=f"{ROOM_ID_PREFIX}{secrets.token_hex(8)}",
            access_code="".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(ACCESS_CODE_LENGTH)),
            password=secrets.token_hex(6).upper(),
        )
