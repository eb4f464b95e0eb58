"""
Meeting Room Aggregate

Lifecycle: created -> active (first join or explicit start) -> ended.
Ended is terminal.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from app.core.domain import (
    AggregateRoot,
    AuthorizationException,
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
    ValueObject,
    generate_uuid_str,
)

from ..events import (
    AudioToggled,
    ChatMessagePosted,
    MeetingEnded,
    MeetingStarted,
    ParticipantJoined,
    ParticipantLeft,
    ScreenShareStarted,
    ScreenShareStopped,
    VideoToggled,
)
from ..value_objects.room_settings import RoomCredentials, RoomRole, RoomSettings


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class RoomParticipant(ValueObject):
    """
    One attendance of a user in a room.

    A user who leaves and comes back gets a new entry; left_at None means
    the user is currently present.
    """

    user_id: str
    name: str
    joined_at: datetime
    email: str | None = None
    role: RoomRole = RoomRole.PARTICIPANT
    left_at: datetime | None = None
    is_audio_enabled: bool = True
    is_video_enabled: bool = True

    @property
    def is_present(self) -> bool:
        return self.left_at is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "joined_at": self.joined_at.isoformat(),
            "left_at": self.left_at.isoformat() if self.left_at else None,
            "is_audio_enabled": self.is_audio_enabled,
            "is_video_enabled": self.is_video_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoomParticipant":
        return cls(
            user_id=data["user_id"],
            name=data.get("name") or "",
            email=data.get("email"),
            role=RoomRole(data.get("role") or RoomRole.PARTICIPANT.value),
            joined_at=datetime.fromisoformat(data["joined_at"]),
            left_at=_parse_dt(data.get("left_at")),
            is_audio_enabled=data.get("is_audio_enabled", True),
            is_video_enabled=data.get("is_video_enabled", True),
        )


@dataclass(frozen=True)
class ChatMessage(ValueObject):
    user_id: str
    name: str
    message: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        return cls(
            user_id=data["user_id"],
            name=data.get("name") or "",
            message=data["message"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class MeetingRoom(AggregateRoot[str]):
    """
    Meeting room bound one-to-one to a virtual appointment.

    Example:
        ```python
        room = MeetingRoom.open(appointment_id, host_id, RoomCredentials.generate(), base_url)
        room.join(host_id, "Dr. House", now=t0)
        room.end(host_id, now=t0 + timedelta(seconds=125))
        room.total_duration  # 125
        ```
    """

    room_id: str = ""
    room_name: str = ""
    room_link: str = ""
    access_code: str = ""
    password: str | None = None

    host_id: str = ""
    appointment_id: str = ""

    is_active: bool = False
    started_at: datetime | None = None
    ended_at: datetime | None = None
    is_recording: bool = False
    recording_id: str | None = None

    participants: list[RoomParticipant] = field(default_factory=list)
    chat_history: list[ChatMessage] = field(default_factory=list)
    settings: RoomSettings = field(default_factory=RoomSettings)

    total_duration: int | None = None
    peak_participants: int = 0

    @classmethod
    def open(
        cls,
        appointment_id: str,
        host_id: str,
        credentials: RoomCredentials,
        base_url: str,
        settings: RoomSettings | None = None,
        now: datetime | None = None,
    ) -> "MeetingRoom":
        """Create an inactive room for an appointment."""
        if not appointment_id or not host_id:
            raise ValidationException("A room needs an appointment and a host", field="host_id")
        now = now or datetime.now(UTC)
        return cls(
            id=generate_uuid_str(),
            room_id=credentials.room_id,
            room_name=f"Meeting-{appointment_id[:8]}",
            room_link=f"{base_url.rstrip('/')}/room/{credentials.room_id}",
            access_code=credentials.access_code,
            password=credentials.password,
            host_id=host_id,
            appointment_id=appointment_id,
            settings=settings or RoomSettings(),
            created_at=now,
            updated_at=now,
        )

    # Derived state

    @property
    def is_ended(self) -> bool:
        return self.ended_at is not None

    def present_participants(self) -> list[RoomParticipant]:
        return [p for p in self.participants if p.is_present]

    def is_present(self, user_id: str) -> bool:
        return self._open_entry_index(user_id) is not None

    def has_participant(self, user_id: str) -> bool:
        return any(p.user_id == user_id for p in self.participants)

    def _open_entry_index(self, user_id: str) -> int | None:
        """Index of the most recently joined entry of user_id that is still open."""
        found: int | None = None
        for index, participant in enumerate(self.participants):
            if participant.user_id == user_id and participant.is_present:
                if found is None or participant.joined_at >= self.participants[found].joined_at:
                    found = index
        return found

    def _ensure_not_ended(self, operation: str) -> None:
        if self.is_ended:
            raise InvalidOperationException(
                operation=operation,
                current_state="ended",
                message="Meeting has already ended",
            )

    def _ensure_host(self, requester_id: str, operation: str) -> None:
        if requester_id != self.host_id:
            raise AuthorizationException(operation=operation, resource=f"meeting:{self.room_id}", user_id=requester_id)

    # Lifecycle

    def join(self, user_id: str, name: str, email: str | None = None, now: datetime | None = None) -> RoomParticipant:
        """Append a new attendance entry and activate the room."""
        self._ensure_not_ended("join")
        if len(self.present_participants()) >= self.settings.max_participants:
            raise InvalidOperationException(
                operation="join",
                current_state="full",
                message=f"Meeting is full ({self.settings.max_participants} participants)",
            )

        now = now or datetime.now(UTC)
        role = RoomRole.HOST if user_id == self.host_id else RoomRole.PARTICIPANT
        participant = RoomParticipant(user_id=user_id, name=name, email=email, role=role, joined_at=now)
        self.participants.append(participant)

        self.is_active = True
        if self.started_at is None:
            self.started_at = now
        self.peak_participants = max(self.peak_participants, len(self.present_participants()))
        self.touch(now)
        self._record_event(ParticipantJoined(room_id=self.room_id, user_id=user_id, name=name, role=role.value))
        return participant

    def leave(self, user_id: str, now: datetime | None = None) -> RoomParticipant | None:
        """
        Close the user's most recent open entry.

        Returns:
            The closed entry, or None if the user was not present
        """
        index = self._open_entry_index(user_id)
        if index is None:
            return None
        now = now or datetime.now(UTC)
        closed = replace(self.participants[index], left_at=now)
        self.participants[index] = closed
        self.touch(now)
        self._record_event(ParticipantLeft(room_id=self.room_id, user_id=user_id, name=closed.name))
        return closed

    def start(self, requester_id: str, now: datetime | None = None, reset_started_at: bool = True) -> None:
        self._ensure_host(requester_id, "start meeting")
        self._ensure_not_ended("start")
        now = now or datetime.now(UTC)
        self.is_active = True
        if reset_started_at or self.started_at is None:
            self.started_at = now
        self.touch(now)
        self._record_event(MeetingStarted(room_id=self.room_id, user_id=requester_id))

    def end(self, requester_id: str, now: datetime | None = None, recording_id: str | None = None) -> bool:
        """
        End the meeting and compute its duration.

        Returns:
            False when the room had already ended
        """
        self._ensure_host(requester_id, "end meeting")
        if self.is_ended:
            return False
        if not self.is_active:
            raise InvalidOperationException(
                operation="end",
                current_state="created",
                message="Meeting was never started",
            )
        now = now or datetime.now(UTC)
        started_at = self.started_at or now
        self.is_active = False
        self.ended_at = now
        self.total_duration = int((now - started_at).total_seconds())
        if recording_id:
            self.recording_id = recording_id
        self.touch(now)
        self._record_event(
            MeetingEnded(room_id=self.room_id, user_id=requester_id, total_duration=self.total_duration)
        )
        return True

    # Chat and media

    def add_chat_message(
        self,
        user_id: str,
        name: str,
        message: str,
        now: datetime | None = None,
        require_presence: bool = False,
    ) -> ChatMessage:
        if not message or not message.strip():
            raise ValidationException("Message is required", field="message")
        self._ensure_not_ended("chat")
        if not self.settings.chat_enabled:
            raise InvalidOperationException(operation="chat", current_state="chat disabled")
        if require_presence and not self.is_present(user_id):
            raise AuthorizationException(operation="chat", resource=f"meeting:{self.room_id}", user_id=user_id)

        now = now or datetime.now(UTC)
        chat = ChatMessage(user_id=user_id, name=name, message=message, timestamp=now)
        self.chat_history.append(chat)
        self.touch(now)
        self._record_event(ChatMessagePosted(room_id=self.room_id, user_id=user_id, name=name, message=message))
        return chat

    def toggle_media(self, user_id: str, audio: bool | None = None, video: bool | None = None) -> RoomParticipant:
        index = self._open_entry_index(user_id)
        if index is None:
            raise EntityNotFoundException(
                entity_type="RoomParticipant",
                entity_id=user_id,
                message=f"User {user_id} is not in meeting {self.room_id}",
            )
        current = self.participants[index]
        updated = replace(
            current,
            is_audio_enabled=current.is_audio_enabled if audio is None else audio,
            is_video_enabled=current.is_video_enabled if video is None else video,
        )
        self.participants[index] = updated
        if audio is not None:
            self._record_event(AudioToggled(room_id=self.room_id, user_id=user_id, is_audio_enabled=audio))
        if video is not None:
            self._record_event(VideoToggled(room_id=self.room_id, user_id=user_id, is_video_enabled=video))
        return updated

    def share_screen(self, user_id: str, name: str | None = None, sharing: bool = True) -> None:
        """Announce a screen share; nothing is stored on the room."""
        self._ensure_not_ended("screen share")
        if sharing and not self.settings.screen_share_enabled:
            raise InvalidOperationException(operation="screen share", current_state="screen share disabled")
        event_cls = ScreenShareStarted if sharing else ScreenShareStopped
        self._record_event(event_cls(room_id=self.room_id, user_id=user_id, name=name))

    # Serialization

    def to_dict(self, include_password: bool = False) -> dict[str, Any]:
        data = {
            "room_id": self.room_id,
            "room_name": self.room_name,
            "room_link": self.room_link,
            "access_code": self.access_code,
            "host_id": self.host_id,
            "appointment_id": self.appointment_id,
            "is_active": self.is_active,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "is_recording": self.is_recording,
            "recording_id": self.recording_id,
            "participants": [p.to_dict() for p in self.participants],
            "settings": self.settings.to_dict(),
            "total_duration": self.total_duration,
            "peak_participants": self.peak_participants,
        }
        if include_password:
            data["password"] = self.password
        return data
