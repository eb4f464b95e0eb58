"""
Meetings API Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities.meeting_room import ChatMessage, MeetingRoom, RoomParticipant


class RoomParticipantResponse(BaseModel):
    user_id: str
    name: str
    email: str | None = None
    role: str
    joined_at: datetime
    left_at: datetime | None = None
    is_audio_enabled: bool
    is_video_enabled: bool

    @classmethod
    def from_entity(cls, participant: RoomParticipant) -> "RoomParticipantResponse":
        return cls(**participant.to_dict())


class RoomSettingsResponse(BaseModel):
    max_participants: int
    allow_recording: bool
    waiting_room_enabled: bool
    screen_share_enabled: bool
    chat_enabled: bool


class MeetingRoomResponse(BaseModel):
    """Room as seen by clients. The password is never included."""

    room_id: str
    room_name: str
    room_link: str
    access_code: str
    host_id: str
    appointment_id: str
    is_active: bool
    started_at: datetime | None = None
    ended_at: datetime | None = None
    is_recording: bool = False
    recording_id: str | None = None
    participants: list[RoomParticipantResponse] = Field(default_factory=list)
    settings: RoomSettingsResponse
    total_duration: int | None = None
    peak_participants: int = 0

    @classmethod
    def from_entity(cls, room: MeetingRoom) -> "MeetingRoomResponse":
        return cls(**room.to_dict(include_password=False))


class ChatMessageResponse(BaseModel):
    user_id: str
    name: str
    message: str
    timestamp: datetime

    @classmethod
    def from_entity(cls, message: ChatMessage) -> "ChatMessageResponse":
        return cls(**message.to_dict())


class JoinRoomRequest(BaseModel):
    name: str | None = None


class EndRoomRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recording_id: str | None = Field(default=None, alias="recordingId")


class ChatMessageRequest(BaseModel):
    message: str | None = None
    name: str | None = None


class MediaStateRequest(BaseModel):
    audio: bool | None = None
    video: bool | None = None
