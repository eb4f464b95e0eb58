"""
Meetings API Routes

FastAPI router for meeting room endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import CurrentPrincipal
from app.domains.meetings.api.dependencies import get_meeting_room_manager
from app.domains.meetings.api.schemas import (
    ChatMessageRequest,
    ChatMessageResponse,
    EndRoomRequest,
    JoinRoomRequest,
    MediaStateRequest,
    MeetingRoomResponse,
    RoomParticipantResponse,
)
from app.domains.meetings.application.services import MeetingRoomManager

router = APIRouter(prefix="/meetings", tags=["Meetings"])

ManagerDep = Annotated[MeetingRoomManager, Depends(get_meeting_room_manager)]


@router.get("/active", response_model=list[MeetingRoomResponse])
async def get_active_meetings(principal: CurrentPrincipal, manager: ManagerDep):
    """Rooms that have not ended and that the caller has joined."""
    rooms = await manager.get_active_meetings(principal.id)
    return [MeetingRoomResponse.from_entity(room) for room in rooms]


@router.get("/{room_id}", response_model=MeetingRoomResponse)
async def get_room(room_id: str, principal: CurrentPrincipal, manager: ManagerDep):
    room = await manager.get_room(room_id)
    return MeetingRoomResponse.from_entity(room)


@router.get("/{room_id}/chat", response_model=list[ChatMessageResponse])
async def get_chat_history(room_id: str, principal: CurrentPrincipal, manager: ManagerDep):
    messages = await manager.get_chat_history(room_id)
    return [ChatMessageResponse.from_entity(m) for m in messages]


@router.post("/{room_id}/join", response_model=MeetingRoomResponse)
async def join_room(
    room_id: str,
    principal: CurrentPrincipal,
    manager: ManagerDep,
    body: JoinRoomRequest | None = None,
):
    """Join a room. The display name defaults to the caller's e-mail."""
    name = (body.name if body else None) or principal.display_name
    room = await manager.join(room_id, principal.id, name, email=principal.email)
    return MeetingRoomResponse.from_entity(room)


@router.post("/{room_id}/leave", response_model=MeetingRoomResponse)
async def leave_room(room_id: str, principal: CurrentPrincipal, manager: ManagerDep):
    room = await manager.leave(room_id, principal.id)
    return MeetingRoomResponse.from_entity(room)


@router.post("/{room_id}/start", response_model=MeetingRoomResponse)
async def start_meeting(room_id: str, principal: CurrentPrincipal, manager: ManagerDep):
    """Host only."""
    room = await manager.start(room_id, principal.id)
    return MeetingRoomResponse.from_entity(room)


@router.post("/{room_id}/end", response_model=MeetingRoomResponse)
async def end_meeting(
    room_id: str,
    principal: CurrentPrincipal,
    manager: ManagerDep,
    body: EndRoomRequest | None = None,
):
    """Host only. Ending an ended meeting returns it unchanged."""
    room = await manager.end(room_id, principal.id, recording_id=body.recording_id if body else None)
    return MeetingRoomResponse.from_entity(room)


@router.post("/{room_id}/chat", response_model=list[ChatMessageResponse])
async def post_chat_message(
    room_id: str,
    body: ChatMessageRequest,
    principal: CurrentPrincipal,
    manager: ManagerDep,
):
    room = await manager.add_chat_message(
        room_id,
        principal.id,
        body.name or principal.display_name,
        body.message or "",
    )
    return [ChatMessageResponse.from_entity(m) for m in room.chat_history]


@router.post("/{room_id}/media", response_model=RoomParticipantResponse)
async def set_media_state(
    room_id: str,
    body: MediaStateRequest,
    principal: CurrentPrincipal,
    manager: ManagerDep,
):
    participant = await manager.toggle_media(room_id, principal.id, audio=body.audio, video=body.video)
    return RoomParticipantResponse.from_entity(participant)


__all__ = ["router"]
