"""
Unit tests for MeetingRoomManager.

Uses the in-memory room repository and a recording publisher.
"""

import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio

from app.core.domain import (
    AuthorizationException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
)
from app.core.shared import KeyedLock, SideEffectRunner
from app.domains.meetings.application.services import MeetingRoomManager
from app.domains.meetings.domain import MeetingRoomPolicy
from app.domains.meetings.domain.events import (
    ChatMessagePosted,
    MeetingEnded,
    MeetingStarted,
    ParticipantJoined,
    ParticipantLeft,
    ScreenShareStarted,
)
from tests.utils import T0, InMemoryMeetingRoomRepository, MeetingRoomBuilder, make_room_credentials

HOST = "user-doctor-1"
GUEST = "user-patient-1"


# ============================================================================
# FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def stored_room(room_repository):
    return await room_repository.add(MeetingRoomBuilder().build())


def credential_sequence(*suffixes: str):
    remaining = [make_room_credentials(suffix) for suffix in suffixes]

    def factory():
        return remaining.pop(0)

    return factory


# ============================================================================
# create_room
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_room_stores_inactive_room(meeting_manager, room_repository):
    room = await meeting_manager.create_room("appointment-0042", HOST)

    stored = room_repository.stored(room.room_id)
    assert stored.is_active is False
    assert stored.host_id == HOST
    assert stored.room_link == f"http://meet.test/room/{room.room_id}"
    assert stored.created_at == T0


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_room_retries_on_credential_clash(room_repository, publisher, runner, clock):
    # Arrange
    await room_repository.add(MeetingRoomBuilder().with_credentials(make_room_credentials("0001")).build())
    manager = MeetingRoomManager(
        repository=room_repository,
        publisher=publisher,
        runner=runner,
        room_lock=KeyedLock(),
        policy=MeetingRoomPolicy(base_url="http://meet.test"),
        clock=clock,
        credential_factory=credential_sequence("0001", "0002"),
    )

    # Act
    room = await manager.create_room("appointment-0042", HOST)

    # Assert
    assert room.room_id == "room-0000000000000002"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_room_gives_up_after_policy_attempts(room_repository, publisher, runner, clock):
    await room_repository.add(MeetingRoomBuilder().build())
    manager = MeetingRoomManager(
        repository=room_repository,
        publisher=publisher,
        runner=runner,
        room_lock=KeyedLock(),
        policy=MeetingRoomPolicy(credential_attempts=2),
        clock=clock,
        credential_factory=credential_sequence("0001", "0001", "0003"),
    )

    with pytest.raises(DuplicateEntityException):
        await manager.create_room("appointment-0042", HOST)


# ============================================================================
# Queries
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_room_is_not_found(meeting_manager):
    with pytest.raises(EntityNotFoundException, match="Room not found"):
        await meeting_manager.get_room("room-missing")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_history_of_new_room_is_empty(meeting_manager, stored_room):
    assert await meeting_manager.get_chat_history(stored_room.room_id) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_active_meetings_include_rooms_the_user_attended(meeting_manager, stored_room):
    await meeting_manager.join(stored_room.room_id, GUEST, "Jane")

    active = await meeting_manager.get_active_meetings(GUEST)

    assert [room.room_id for room in active] == [stored_room.room_id]
    assert await meeting_manager.get_active_meetings("user-stranger") == []


# ============================================================================
# Lifecycle
# ============================================================================


class TestLifecycle:
    """Join, leave, start and end through the manager."""

    @pytest.mark.asyncio
    async def test_join_leave_rejoin_persists_two_entries(self, meeting_manager, room_repository, stored_room, clock):
        room_id = stored_room.room_id

        await meeting_manager.join(room_id, GUEST, "Jane", email="jane@mail.test")
        clock.now = T0 + timedelta(minutes=5)
        await meeting_manager.leave(room_id, GUEST)
        clock.now = T0 + timedelta(minutes=7)
        await meeting_manager.join(room_id, GUEST, "Jane")

        stored = room_repository.stored(room_id)
        assert len(stored.participants) == 2
        assert stored.participants[0].left_at == T0 + timedelta(minutes=5)
        assert stored.participants[1].is_present is True
        assert stored.started_at == T0

    @pytest.mark.asyncio
    async def test_leave_of_absent_user_changes_nothing(self, meeting_manager, publisher, runner, stored_room):
        room = await meeting_manager.leave(stored_room.room_id, GUEST)
        await runner.drain()

        assert room.participants == []
        assert publisher.room_events == []

    @pytest.mark.asyncio
    async def test_events_are_published_after_write(self, meeting_manager, publisher, runner, stored_room):
        room_id = stored_room.room_id

        await meeting_manager.join(room_id, HOST, "Dr. House")
        await meeting_manager.add_chat_message(room_id, HOST, "Dr. House", "Welcome")
        await meeting_manager.leave(room_id, HOST)
        await runner.drain()

        assert [type(e) for e in publisher.room_events] == [ParticipantJoined, ChatMessagePosted, ParticipantLeft]
        assert all(e.room_id == room_id for e in publisher.room_events)

    @pytest.mark.asyncio
    async def test_start_and_end_record_duration(self, meeting_manager, publisher, runner, stored_room, clock):
        room_id = stored_room.room_id

        await meeting_manager.start(room_id, HOST)
        clock.now = T0 + timedelta(seconds=125)
        room = await meeting_manager.end(room_id, HOST, recording_id="rec-9")
        await runner.drain()

        assert room.total_duration == 125
        assert room.recording_id == "rec-9"
        assert [type(e) for e in publisher.room_events] == [MeetingStarted, MeetingEnded]
        assert publisher.room_events[-1].payload()["totalDuration"] == 125

    @pytest.mark.asyncio
    async def test_non_host_cannot_start(self, meeting_manager, room_repository, stored_room):
        with pytest.raises(AuthorizationException):
            await meeting_manager.start(stored_room.room_id, GUEST)

        assert room_repository.stored(stored_room.room_id).is_active is False

    @pytest.mark.asyncio
    async def test_repeated_end_returns_ended_room(self, meeting_manager, room_repository, stored_room, clock):
        room_id = stored_room.room_id
        await meeting_manager.start(room_id, HOST)
        clock.now = T0 + timedelta(seconds=60)
        first = await meeting_manager.end(room_id, HOST)
        clock.now = T0 + timedelta(seconds=600)

        second = await meeting_manager.end(room_id, HOST)

        assert second.total_duration == first.total_duration == 60
        assert room_repository.ended_writes == 1


class TestConcurrentEnd:
    """Concurrent end requests produce one end write."""

    @pytest.mark.asyncio
    async def test_same_manager(self, meeting_manager, room_repository, publisher, runner, stored_room, clock):
        room_id = stored_room.room_id
        await meeting_manager.start(room_id, HOST)
        clock.now = T0 + timedelta(seconds=90)

        first, second = await asyncio.gather(
            meeting_manager.end(room_id, HOST),
            meeting_manager.end(room_id, HOST),
        )
        await runner.drain()

        assert first.total_duration == second.total_duration == 90
        assert room_repository.ended_writes == 1
        assert sum(isinstance(e, MeetingEnded) for e in publisher.room_events) == 1

    @pytest.mark.asyncio
    async def test_separate_managers_share_the_store(self, room_repository, publisher, stored_room, clock):
        runner = SideEffectRunner()

        def build_manager():
            return MeetingRoomManager(
                repository=room_repository,
                publisher=publisher,
                runner=runner,
                room_lock=KeyedLock(),
                clock=clock,
            )

        first_manager, second_manager = build_manager(), build_manager()
        room_id = stored_room.room_id
        await first_manager.start(room_id, HOST)
        clock.now = T0 + timedelta(seconds=30)

        first, second = await asyncio.gather(
            first_manager.end(room_id, HOST),
            second_manager.end(room_id, HOST),
        )
        await runner.drain()

        assert room_repository.ended_writes == 1
        assert first.ended_at == second.ended_at == T0 + timedelta(seconds=30)
        assert sum(isinstance(e, MeetingEnded) for e in publisher.room_events) == 1


class HeldReadRepository(InMemoryMeetingRoomRepository):
    """Hands out one room copy and then parks the reader until released."""

    def __init__(self):
        super().__init__()
        self.read_taken = asyncio.Event()
        self.release = asyncio.Event()
        self._hold_next = False

    def hold_next_read(self) -> None:
        self._hold_next = True

    async def get_by_room_id(self, room_id: str):
        room = await super().get_by_room_id(room_id)
        if self._hold_next:
            self._hold_next = False
            self.read_taken.set()
            await self.release.wait()
        return room


@pytest.mark.unit
class TestWritesAcrossWorkers:
    """Two managers with their own in-process locks sharing one store."""

    @pytest.fixture
    def shared_store(self) -> HeldReadRepository:
        return HeldReadRepository()

    @pytest_asyncio.fixture
    async def room_id(self, shared_store) -> str:
        room = await shared_store.add(MeetingRoomBuilder().build())
        return room.room_id

    @pytest.fixture
    def workers(self, shared_store, publisher, runner, clock):
        def build():
            return MeetingRoomManager(
                repository=shared_store,
                publisher=publisher,
                runner=runner,
                room_lock=KeyedLock(),
                clock=clock,
            )

        return build(), build()

    @pytest.mark.asyncio
    async def test_join_read_before_end_cannot_reopen_the_room(self, shared_store, room_id, workers, clock):
        worker_a, worker_b = workers
        await worker_b.start(room_id, HOST)

        shared_store.hold_next_read()
        join = asyncio.create_task(worker_a.join(room_id, GUEST, "Jane"))
        await shared_store.read_taken.wait()
        clock.now = T0 + timedelta(seconds=60)
        await worker_b.end(room_id, HOST)
        shared_store.release.set()

        with pytest.raises(InvalidOperationException):
            await join

        final = shared_store.stored(room_id)
        assert final.is_ended
        assert final.is_active is False
        assert final.total_duration == 60
        assert not final.has_participant(GUEST)
        assert shared_store.stale_writes == 1

    @pytest.mark.asyncio
    async def test_chat_read_before_join_is_replayed_on_fresh_copy(
        self, shared_store, room_id, workers, publisher, runner
    ):
        worker_a, worker_b = workers
        await worker_b.join(room_id, HOST, "Dr. House")

        shared_store.hold_next_read()
        chat = asyncio.create_task(worker_a.add_chat_message(room_id, HOST, "Dr. House", "hello"))
        await shared_store.read_taken.wait()
        await worker_b.join(room_id, GUEST, "Jane")
        shared_store.release.set()
        await chat
        await runner.drain()

        final = shared_store.stored(room_id)
        assert final.is_present(GUEST)
        assert [c.message for c in final.chat_history] == ["hello"]
        assert shared_store.stale_writes == 1
        assert sum(isinstance(e, ChatMessagePosted) for e in publisher.room_events) == 1


# ============================================================================
# Chat and media
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_requires_presence_when_policy_says_so(room_repository, publisher, runner, clock, stored_room):
    manager = MeetingRoomManager(
        repository=room_repository,
        publisher=publisher,
        runner=runner,
        room_lock=KeyedLock(),
        policy=MeetingRoomPolicy(chat_requires_presence=True),
        clock=clock,
    )

    with pytest.raises(AuthorizationException):
        await manager.add_chat_message(stored_room.room_id, GUEST, "Jane", "hello")

    await manager.join(stored_room.room_id, GUEST, "Jane")
    room = await manager.add_chat_message(stored_room.room_id, GUEST, "Jane", "hello")
    assert [m.message for m in room.chat_history] == ["hello"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_toggle_media_is_persisted(meeting_manager, room_repository, stored_room):
    await meeting_manager.join(stored_room.room_id, GUEST, "Jane")

    participant = await meeting_manager.toggle_media(stored_room.room_id, GUEST, video=False)

    assert participant.is_video_enabled is False
    assert room_repository.stored(stored_room.room_id).participants[0].is_video_enabled is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_screen_share_is_broadcast_only(meeting_manager, room_repository, publisher, runner, stored_room):
    before = room_repository.stored(stored_room.room_id)

    await meeting_manager.share_screen(stored_room.room_id, GUEST, name="Jane")
    await runner.drain()

    assert [type(e) for e in publisher.room_events] == [ScreenShareStarted]
    assert room_repository.stored(stored_room.room_id).updated_at == before.updated_at
