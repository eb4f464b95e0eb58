"""
Meeting Room Domain Events

Broadcast to the ``meeting-{room_id}`` channel. ``event_name`` is the name
clients listen for.
"""

from dataclasses import dataclass
from typing import Any

from app.core.domain import DomainEvent


@dataclass(frozen=True)
class RoomEvent(DomainEvent):
    room_id: str = ""
    user_id: str = ""
    name: str | None = None

    event_name = "room-updated"

    def payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {"userId": self.user_id, "timestamp": self.occurred_at.isoformat()}
        if self.name is not None:
            data["name"] = self.name
        data.update(self._extra())
        return data

    def _extra(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class ParticipantJoined(RoomEvent):
    role: str = ""

    event_name = "participant-joined"

    def _extra(self) -> dict[str, Any]:
        return {"role": self.role}


@dataclass(frozen=True)
class ParticipantLeft(RoomEvent):
    event_name = "participant-left"


@dataclass(frozen=True)
class MeetingStarted(RoomEvent):
    event_name = "meeting-started"


@dataclass(frozen=True)
class MeetingEnded(RoomEvent):
    total_duration: int = 0

    event_name = "meeting-ended"

    def _extra(self) -> dict[str, Any]:
        return {"totalDuration": self.total_duration}


@dataclass(frozen=True)
class ChatMessagePosted(RoomEvent):
    message: str = ""

    event_name = "receive-chat"

    def _extra(self) -> dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class AudioToggled(RoomEvent):
    is_audio_enabled: bool = True

    event_name = "audio-toggled"

    def _extra(self) -> dict[str, Any]:
        return {"isAudioEnabled": self.is_audio_enabled}


@dataclass(frozen=True)
class VideoToggled(RoomEvent):
    is_video_enabled: bool = True

    event_name = "video-toggled"

    def _extra(self) -> dict[str, Any]:
        return {"isVideoEnabled": self.is_video_enabled}


@dataclass(frozen=True)
class ScreenShareStarted(RoomEvent):
    event_name = "screen-share-started"


@dataclass(frozen=True)
class ScreenShareStopped(RoomEvent):
    event_name = "screen-share-stopped"
