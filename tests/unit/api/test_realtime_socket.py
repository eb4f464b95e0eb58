"""
Tests for the realtime WebSocket endpoint.

The socket runs against the application's own connection manager and local
broker; meeting rooms live in an in-memory repository.
"""

from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.api.routes.realtime import get_meeting_manager_scope
from app.core.shared import KeyedLock
from app.domains.meetings.application.services import MeetingRoomManager
from tests.utils import InMemoryMeetingRoomRepository, MeetingRoomBuilder

WS = "/api/v1/realtime/ws"
GUEST = "user-patient-1"
ROOM_ID = "room-0000000000000001"


@pytest.fixture
def socket_client(fastapi_app, runner, clock) -> TestClient:
    container = fastapi_app.state.container
    manager = MeetingRoomManager(
        repository=InMemoryMeetingRoomRepository([MeetingRoomBuilder().build()]),
        publisher=container.get_event_fanout(),
        runner=runner,
        room_lock=KeyedLock("meeting-room"),
        clock=clock,
    )

    @asynccontextmanager
    async def scope():
        yield manager

    fastapi_app.dependency_overrides[get_meeting_manager_scope] = lambda: scope
    return TestClient(fastapi_app)


@pytest.fixture
def token(token_service):
    return token_service.create_access_token({"sub": GUEST, "email": "jane@mail.test"})


def test_invalid_token_closes_socket(socket_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with socket_client.websocket_connect(f"{WS}?token=not-a-jwt") as websocket:
            websocket.receive_json()

    assert exc_info.value.code == 1008


def test_missing_token_closes_socket(socket_client):
    with pytest.raises(WebSocketDisconnect):
        with socket_client.websocket_connect(WS) as websocket:
            websocket.receive_json()


def test_subscribe_only_to_own_channel(socket_client, token):
    with socket_client.websocket_connect(f"{WS}?token={token}") as websocket:
        websocket.send_json({"action": "subscribe-appointments", "data": {"userId": "user-someone-else"}})

        reply = websocket.receive_json()

    assert reply == {"event": "subscribed", "data": {"channel": f"appointments-{GUEST}"}}


def test_malformed_and_unknown_messages_get_errors(socket_client, token):
    with socket_client.websocket_connect(f"{WS}?token={token}") as websocket:
        websocket.send_text("not json")
        malformed = websocket.receive_json()
        websocket.send_json(["subscribe-appointments"])
        not_object = websocket.receive_json()
        websocket.send_json({"action": "dance"})
        unknown = websocket.receive_json()

    assert malformed["data"]["code"] == "INVALID_MESSAGE"
    assert not_object["data"]["code"] == "INVALID_MESSAGE"
    assert unknown == {"event": "error", "data": {"code": "UNKNOWN_ACTION", "message": "Unknown action: dance"}}


def test_meeting_flow(socket_client, token):
    with socket_client.websocket_connect(f"{WS}?token={token}") as websocket:
        websocket.send_json({"action": "join-meeting", "data": {"roomId": ROOM_ID}})
        subscribed = websocket.receive_json()
        joined = websocket.receive_json()

        websocket.send_json({"action": "send-chat", "data": {"roomId": ROOM_ID, "message": "hello"}})
        chat = websocket.receive_json()

    assert subscribed["data"]["channel"] == f"meeting-{ROOM_ID}"
    assert joined["event"] == "participant-joined"
    assert joined["data"]["userId"] == GUEST
    assert joined["data"]["name"] == "jane@mail.test"
    assert chat["event"] == "receive-chat"
    assert chat["data"]["message"] == "hello"


def test_meeting_errors_are_reported_on_the_socket(socket_client, token):
    with socket_client.websocket_connect(f"{WS}?token={token}") as websocket:
        websocket.send_json({"action": "join-meeting", "data": {"roomId": "room-missing"}})
        missing = websocket.receive_json()
        websocket.send_json({"action": "toggle-audio", "data": {}})
        no_room = websocket.receive_json()
        websocket.send_json({"action": "toggle-audio", "data": {"roomId": ROOM_ID, "enabled": False}})
        absent = websocket.receive_json()

    assert missing["data"] == {"code": "ENTITY_NOT_FOUND", "message": "Room not found"}
    assert no_room["data"]["code"] == "VALIDATION_ERROR"
    assert absent["data"]["code"] == "ENTITY_NOT_FOUND"
