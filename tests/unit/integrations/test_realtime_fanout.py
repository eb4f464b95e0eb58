"""
Unit tests for the realtime integration.

Covers the channel registry, the brokers and the domain event fan-out.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from app.domains.meetings.domain.events import MeetingEnded, ParticipantJoined
from app.domains.scheduling.domain.events import AppointmentCancelled, AppointmentReminderDue
from app.integrations.realtime import (
    APPOINTMENT_REMINDER,
    APPOINTMENT_UPDATED,
    ConnectionManager,
    LocalRealtimeBroker,
    RealtimeEventFanout,
    RedisRealtimeBroker,
    appointment_channel,
    envelope,
    meeting_channel,
)
from tests.utils import FakeWebSocket, RecordingBroker

# ============================================================================
# ConnectionManager
# ============================================================================


class TestConnectionManager:
    @pytest.mark.asyncio
    async def test_broadcast_reaches_channel_subscribers_only(self) -> None:
        manager = ConnectionManager()
        first, second, other = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        for socket in (first, second, other):
            await manager.connect(socket)
        manager.subscribe(first, "appointments-user-1")
        manager.subscribe(second, "appointments-user-1")
        manager.subscribe(other, "appointments-user-2")

        delivered = await manager.broadcast("appointments-user-1", {"event": "ping"})

        assert delivered == 2
        assert first.accepted is True
        assert first.sent == second.sent == [{"event": "ping"}]
        assert other.sent == []

    @pytest.mark.asyncio
    async def test_failing_socket_is_dropped_from_every_channel(self) -> None:
        manager = ConnectionManager()
        broken, healthy = FakeWebSocket(fail=True), FakeWebSocket()
        manager.subscribe(broken, "meeting-room-1")
        manager.subscribe(broken, "appointments-user-1")
        manager.subscribe(healthy, "meeting-room-1")

        delivered = await manager.broadcast("meeting-room-1", {"event": "x"})

        assert delivered == 1
        assert manager.channels_of(broken) == []
        assert manager.subscriber_count("meeting-room-1") == 1
        assert manager.subscriber_count("appointments-user-1") == 0

    @pytest.mark.asyncio
    async def test_channel_lock_survives_while_a_broadcast_is_queued(self) -> None:
        manager = ConnectionManager()
        gate = asyncio.Event()

        class StallingBrokenSocket(FakeWebSocket):
            async def send_json(self, data):
                await gate.wait()
                raise RuntimeError("socket closed")

        broken = StallingBrokenSocket()
        manager.subscribe(broken, "meeting-room-1")
        lock_seen_after_drop: list[bool] = []
        drop = manager.disconnect

        def recording_disconnect(websocket):
            drop(websocket)
            lock_seen_after_drop.append("meeting-room-1" in manager._locks)

        manager.disconnect = recording_disconnect

        first = asyncio.create_task(manager.broadcast("meeting-room-1", {"event": "a"}))
        await asyncio.sleep(0)
        second = asyncio.create_task(manager.broadcast("meeting-room-1", {"event": "b"}))
        await asyncio.sleep(0)
        gate.set()

        assert await first == 0
        assert await second == 0
        # The queued broadcast still needed the lock when the last socket went away
        assert lock_seen_after_drop == [True]
        assert manager.subscriber_count("meeting-room-1") == 0
        assert "meeting-room-1" not in manager._locks

    @pytest.mark.asyncio
    async def test_idle_channel_lock_is_forgotten(self) -> None:
        manager = ConnectionManager()
        socket = FakeWebSocket()
        manager.subscribe(socket, "meeting-room-1")
        await manager.broadcast("meeting-room-1", {"event": "x"})
        assert "meeting-room-1" in manager._locks

        manager.unsubscribe(socket, "meeting-room-1")

        assert "meeting-room-1" not in manager._locks

    @pytest.mark.asyncio
    async def test_broadcast_to_unknown_channel(self) -> None:
        assert await ConnectionManager().broadcast("nobody", {"event": "x"}) == 0

    def test_unsubscribe_and_disconnect(self) -> None:
        manager = ConnectionManager()
        socket = FakeWebSocket()
        manager.subscribe(socket, "a")
        manager.subscribe(socket, "b")

        manager.unsubscribe(socket, "a")
        assert manager.channels_of(socket) == ["b"]

        manager.disconnect(socket)
        assert manager.channels_of(socket) == []
        manager.unsubscribe(socket, "never-subscribed")


# ============================================================================
# Brokers
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_local_broker_wraps_payload_in_envelope():
    manager = ConnectionManager()
    socket = FakeWebSocket()
    manager.subscribe(socket, "meeting-room-1")

    await LocalRealtimeBroker(manager).publish("meeting-room-1", "receive-chat", {"message": "hi"})

    assert socket.sent == [{"event": "receive-chat", "data": {"message": "hi"}}]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_broker_publishes_json_to_shared_channel():
    client = AsyncMock()
    broker = RedisRealtimeBroker(client, ConnectionManager(), redis_channel="test:realtime")

    await broker.publish("appointments-user-1", APPOINTMENT_UPDATED, {"appointmentId": "a-1"})

    channel, raw = client.publish.await_args.args
    assert channel == "test:realtime"
    assert json.loads(raw) == {
        "channel": "appointments-user-1",
        "event": APPOINTMENT_UPDATED,
        "payload": {"appointmentId": "a-1"},
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_broker_dispatch_forwards_and_discards_malformed():
    manager = ConnectionManager()
    socket = FakeWebSocket()
    manager.subscribe(socket, "meeting-room-1")
    broker = RedisRealtimeBroker(AsyncMock(), manager)

    await broker.dispatch(b'{"channel": "meeting-room-1", "event": "meeting-ended", "payload": {"totalDuration": 5}}')
    await broker.dispatch("not json")
    await broker.dispatch('{"channel": "meeting-room-1"}')

    assert socket.sent == [envelope("meeting-ended", {"totalDuration": 5})]


# ============================================================================
# RealtimeEventFanout
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_appointment_events_go_to_each_audience_member():
    broker = RecordingBroker()
    event = AppointmentCancelled(
        appointment_id="a-1",
        audience=("user-doctor-1", "user-patient-1"),
        snapshot={"id": "a-1", "status": "cancelled"},
        reason="Doctor unavailable",
    )

    await RealtimeEventFanout(broker).publish([event])

    assert broker.channels() == [appointment_channel("user-doctor-1"), appointment_channel("user-patient-1")]
    _, name, payload = broker.published[0]
    assert name == APPOINTMENT_UPDATED
    assert payload["type"] == "cancelled"
    assert payload["appointmentId"] == "a-1"
    assert payload["data"] == {"id": "a-1", "status": "cancelled"}
    assert "timestamp" in payload


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reminder_uses_its_own_event_name():
    broker = RecordingBroker()
    event = AppointmentReminderDue(appointment_id="a-1", audience=("user-patient-1",))

    await RealtimeEventFanout(broker).publish([event])

    channel, name, payload = broker.published[0]
    assert channel == "appointments-user-patient-1"
    assert name == APPOINTMENT_REMINDER
    assert payload["message"] == "Your appointment is starting soon"
    assert "type" not in payload


@pytest.mark.unit
@pytest.mark.asyncio
async def test_room_events_go_to_meeting_channel():
    broker = RecordingBroker()
    events = [
        ParticipantJoined(room_id="room-1", user_id="user-1", name="Jane", role="participant"),
        MeetingEnded(room_id="room-1", user_id="user-host", total_duration=125),
    ]

    await RealtimeEventFanout(broker).publish_room_events(events)

    assert broker.channels() == [meeting_channel("room-1")] * 2
    assert [name for _, name, _ in broker.published] == ["participant-joined", "meeting-ended"]
    assert broker.published[0][2]["role"] == "participant"
    assert broker.published[1][2]["totalDuration"] == 125


@pytest.mark.unit
@pytest.mark.asyncio
async def test_broker_failure_does_not_stop_remaining_channels():
    broker = AsyncMock()
    broker.publish.side_effect = [ConnectionError("redis down"), None]
    event = AppointmentCancelled(appointment_id="a-1", audience=("user-1", "user-2"))

    await RealtimeEventFanout(broker).publish([event])

    assert broker.publish.await_count == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_notify_adds_timestamp():
    broker = RecordingBroker()

    await RealtimeEventFanout(broker).notify("meeting-room-1", "user-typing", {"userId": "user-1"})

    _, name, payload = broker.published[0]
    assert name == "user-typing"
    assert payload["userId"] == "user-1"
    assert "timestamp" in payload
