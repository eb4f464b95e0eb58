"""
Realtime WebSocket endpoint.

One socket per client. After connecting with ``?token=<jwt>`` the client
sends JSON messages ``{"action": ..., "data": {...}}`` to subscribe to its
appointment channel or to meeting room channels. Server pushes arrive as
``{"event": ..., "data": {...}}``.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from app.api.dependencies import Container, Principal
from app.core.domain import DomainException, ValidationException
from app.database.async_db import get_async_db_context
from app.domains.meetings.application.services import MeetingRoomManager
from app.integrations.realtime import (
    ConnectionManager,
    RealtimeEventFanout,
    appointment_channel,
    envelope,
    meeting_channel,
)
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])

MeetingManagerScope = Callable[[], AbstractAsyncContextManager[MeetingRoomManager]]


def get_meeting_manager_scope(container: Container) -> MeetingManagerScope:
    """Each socket message that touches a room runs in its own database session."""

    @asynccontextmanager
    async def scope():
        async with get_async_db_context() as db:
            yield container.create_meeting_room_manager(db)

    return scope


def get_token_service(container: Container) -> TokenService:
    return TokenService(container.settings)


class RealtimeSession:
    """Dispatches the messages of one authenticated socket."""

    def __init__(
        self,
        websocket: WebSocket,
        principal: Principal,
        connections: ConnectionManager,
        fanout: RealtimeEventFanout,
        manager_scope: MeetingManagerScope,
    ):
        self.websocket = websocket
        self.principal = principal
        self.connections = connections
        self.fanout = fanout
        self.manager_scope = manager_scope
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            "subscribe-appointments": self.subscribe_appointments,
            "join-meeting": self.join_meeting,
            "leave-meeting": self.leave_meeting,
            "screen-share-start": self.screen_share_start,
            "screen-share-stop": self.screen_share_stop,
            "toggle-audio": self.toggle_audio,
            "toggle-video": self.toggle_video,
            "send-chat": self.send_chat,
        }

    async def handle(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            await self.reply_error("INVALID_MESSAGE", "Message must be JSON")
            return
        if not isinstance(message, dict):
            await self.reply_error("INVALID_MESSAGE", "Message must be a JSON object")
            return

        action = message.get("action")
        handler = self._handlers.get(action)  # type: ignore[arg-type]
        if handler is None:
            await self.reply_error("UNKNOWN_ACTION", f"Unknown action: {action}")
            return

        try:
            await handler(message.get("data") or {})
        except DomainException as e:
            logger.info(f"Realtime {action} by {self.principal.id} rejected: {e.message}")
            await self.reply_error(e.code, e.message)

    async def reply(self, event: str, payload: dict[str, Any]) -> None:
        await self.websocket.send_json(envelope(event, payload))

    async def reply_error(self, code: str, message: str) -> None:
        await self.reply("error", {"code": code, "message": message})

    @property
    def name(self) -> str:
        return self.principal.display_name

    @staticmethod
    def _room_id(data: dict[str, Any]) -> str:
        room_id = data.get("roomId")
        if not room_id:
            raise ValidationException("roomId is required", field="roomId")
        return str(room_id)

    # ==================== APPOINTMENTS ====================

    async def subscribe_appointments(self, data: dict[str, Any]) -> None:
        # Only the caller's own channel, whatever userId the client sends
        channel = appointment_channel(self.principal.id)
        self.connections.subscribe(self.websocket, channel)
        await self.reply("subscribed", {"channel": channel})

    # ==================== MEETINGS ====================

    async def join_meeting(self, data: dict[str, Any]) -> None:
        room_id = self._room_id(data)
        async with self.manager_scope() as manager:
            await manager.get_room(room_id)
        channel = meeting_channel(room_id)
        self.connections.subscribe(self.websocket, channel)
        await self.reply("subscribed", {"channel": channel})
        await self.fanout.notify(channel, "participant-joined", {"userId": self.principal.id, "name": self.name})

    async def leave_meeting(self, data: dict[str, Any]) -> None:
        room_id = self._room_id(data)
        channel = meeting_channel(room_id)
        self.connections.unsubscribe(self.websocket, channel)
        await self.fanout.notify(channel, "participant-left", {"userId": self.principal.id, "name": self.name})

    async def screen_share_start(self, data: dict[str, Any]) -> None:
        await self._share_screen(data, sharing=True)

    async def screen_share_stop(self, data: dict[str, Any]) -> None:
        await self._share_screen(data, sharing=False)

    async def _share_screen(self, data: dict[str, Any], sharing: bool) -> None:
        room_id = self._room_id(data)
        async with self.manager_scope() as manager:
            await manager.share_screen(room_id, self.principal.id, name=self.name, sharing=sharing)

    async def toggle_audio(self, data: dict[str, Any]) -> None:
        room_id = self._room_id(data)
        async with self.manager_scope() as manager:
            await manager.toggle_media(room_id, self.principal.id, audio=bool(data.get("enabled")))

    async def toggle_video(self, data: dict[str, Any]) -> None:
        room_id = self._room_id(data)
        async with self.manager_scope() as manager:
            await manager.toggle_media(room_id, self.principal.id, video=bool(data.get("enabled")))

    async def send_chat(self, data: dict[str, Any]) -> None:
        room_id = self._room_id(data)
        async with self.manager_scope() as manager:
            await manager.add_chat_message(
                room_id,
                self.principal.id,
                data.get("name") or self.name,
                data.get("message") or "",
            )


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    container: Container,
    token_service: Annotated[TokenService, Depends(get_token_service)],
    manager_scope: Annotated[MeetingManagerScope, Depends(get_meeting_manager_scope)],
    token: Annotated[str | None, Query()] = None,
):
    if not token or not token_service.verify_token(token):
        logger.warning("Rejected realtime connection without a valid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    principal = Principal.from_claims(token_service.decode_token(token))
    connections = container.connection_manager
    await connections.connect(websocket)
    logger.info(f"Realtime connection opened for user {principal.id}")

    session = RealtimeSession(websocket, principal, connections, container.get_event_fanout(), manager_scope)
    try:
        while True:
            await session.handle(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.info(f"Realtime connection closed for user {principal.id}")
    finally:
        connections.disconnect(websocket)


__all__ = ["router"]
