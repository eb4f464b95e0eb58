"""
Meeting Room Policy

Deployment-level choices the room manager applies to every room.
"""

from dataclasses import dataclass

from ..value_objects.room_settings import RoomSettings


@dataclass(frozen=True)
class MeetingRoomPolicy:
    base_url: str = "http://localhost:3000"
    max_participants: int = 100
    # A repeated start overwrites started_at
    restart_resets_started_at: bool = True
    # Only participants currently in the room may chat
    chat_requires_presence: bool = False
    credential_attempts: int = 3
    # Reload-and-replay rounds when another worker wrote the room first
    write_attempts: int = 3

    def room_settings(self) -> RoomSettings:
        return RoomSettings(max_participants=self.max_participants)
