"""
Meeting Room Manager

Application service owning the meeting room lifecycle: creation, join and
leave, start and end, chat and media state. Every mutation of one room is
serialized in-process and its events are broadcast after the write.
Across processes, writes are version-guarded and replayed on a fresh copy
when another worker got there first.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import TypeVar

from app.core.domain import (
    AuthorizationException,
    ConcurrencyException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
)
from app.core.shared import KeyedLock, SideEffectRunner

from ...domain.entities.meeting_room import ChatMessage, MeetingRoom, RoomParticipant
from ...domain.events import RoomEvent
from ...domain.services.meeting_policy import MeetingRoomPolicy
from ...domain.value_objects.room_settings import RoomCredentials
from ..ports.meeting_room_repository import IMeetingRoomRepository
from ..ports.room_event_publisher import IRoomEventPublisher

logger = logging.getLogger(__name__)

R = TypeVar("R")


class MeetingRoomManager:
    """
    Meeting room lifecycle manager.

    Example:
        ```python
        manager = MeetingRoomManager(repository, publisher, runner, room_lock)
        room = await manager.create_room(appointment_id, host_id)
        await manager.join(room.room_id, host_id, "Dr. House")
        await manager.end(room.room_id, host_id)
        ```
    """

    def __init__(
        self,
        repository: IMeetingRoomRepository,
        publisher: IRoomEventPublisher,
        runner: SideEffectRunner,
        room_lock: KeyedLock,
        policy: MeetingRoomPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
        credential_factory: Callable[[], RoomCredentials] = RoomCredentials.generate,
    ):
        self.repository = repository
        self.publisher = publisher
        self.runner = runner
        self.room_lock = room_lock
        self.policy = policy or MeetingRoomPolicy()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.credential_factory = credential_factory

    # ==================== CREATION ====================

    async def create_room(self, appointment_id: str, host_id: str) -> MeetingRoom:
        """
        Create an inactive room for an appointment.

        The room is only staged in the current unit of work; it is committed
        together with the appointment that owns it.

        Raises:
            DuplicateEntityException: Credentials clashed on every attempt
        """
        last_error: DuplicateEntityException | None = None
        for attempt in range(1, self.policy.credential_attempts + 1):
            room = MeetingRoom.open(
                appointment_id=appointment_id,
                host_id=host_id,
                credentials=self.credential_factory(),
                base_url=self.policy.base_url,
                settings=self.policy.room_settings(),
                now=self.clock(),
            )
            try:
                created = await self.repository.add(room)
            except DuplicateEntityException as e:
                logger.warning(f"Room credential clash for appointment {appointment_id} (attempt {attempt}): {e}")
                last_error = e
                continue
            logger.info(f"Meeting room {created.room_id} created for appointment {appointment_id}")
            return created

        logger.error(f"Could not allocate unique room credentials for appointment {appointment_id}")
        raise last_error or DuplicateEntityException(entity_type="MeetingRoom", field="room_id", value=appointment_id)

    # ==================== QUERIES ====================

    async def get_room(self, room_id: str) -> MeetingRoom:
        room = await self.repository.get_by_room_id(room_id)
        if room is None:
            raise EntityNotFoundException(entity_type="MeetingRoom", entity_id=room_id, message="Room not found")
        return room

    async def get_chat_history(self, room_id: str) -> list[ChatMessage]:
        room = await self.get_room(room_id)
        return list(room.chat_history)

    async def get_active_meetings(self, user_id: str) -> list[MeetingRoom]:
        return await self.repository.find_active_for_user(user_id)

    # ==================== LIFECYCLE ====================

    async def join(self, room_id: str, user_id: str, name: str, email: str | None = None) -> MeetingRoom:
        room, _ = await self._write(room_id, lambda r: r.join(user_id, name, email=email, now=self.clock()))
        return room

    async def leave(self, room_id: str, user_id: str) -> MeetingRoom:
        room, closed = await self._write(room_id, lambda r: r.leave(user_id, now=self.clock()))
        if closed is None:
            logger.debug(f"User {user_id} left room {room_id} without being present")
        return room

    async def start(self, room_id: str, requester_id: str) -> MeetingRoom:
        try:
            room, _ = await self._write(
                room_id,
                lambda r: r.start(
                    requester_id,
                    now=self.clock(),
                    reset_started_at=self.policy.restart_resets_started_at,
                ),
            )
        except (AuthorizationException, InvalidOperationException):
            logger.warning(f"User {requester_id} could not start room {room_id}")
            raise
        logger.info(f"Meeting {room_id} started by {requester_id}")
        return room

    async def end(self, room_id: str, requester_id: str, recording_id: str | None = None) -> MeetingRoom:
        """
        End a meeting. A repeated or concurrent end returns the ended room unchanged.
        """
        async with self.room_lock.hold(room_id):
            room = await self.get_room(room_id)
            try:
                changed = room.end(requester_id, now=self.clock(), recording_id=recording_id)
            except (AuthorizationException, InvalidOperationException):
                logger.warning(f"User {requester_id} could not end room {room_id}")
                raise
            if not changed:
                return room

            events = room.pull_domain_events()
            if not await self.repository.save_ended(room):
                logger.info(f"Room {room_id} was already ended by a concurrent request")
                return await self.get_room(room_id)

        logger.info(f"Meeting {room_id} ended after {room.total_duration}s")
        self._publish(events)
        return room

    # ==================== CHAT AND MEDIA ====================

    async def add_chat_message(self, room_id: str, user_id: str, name: str, message: str) -> MeetingRoom:
        room, _ = await self._write(
            room_id,
            lambda r: r.add_chat_message(
                user_id,
                name,
                message,
                now=self.clock(),
                require_presence=self.policy.chat_requires_presence,
            ),
        )
        return room

    async def toggle_media(
        self,
        room_id: str,
        user_id: str,
        audio: bool | None = None,
        video: bool | None = None,
    ) -> RoomParticipant:
        _, participant = await self._write(room_id, lambda r: r.toggle_media(user_id, audio=audio, video=video))
        return participant

    async def share_screen(self, room_id: str, user_id: str, name: str | None = None, sharing: bool = True) -> None:
        room = await self.get_room(room_id)
        room.share_screen(user_id, name=name, sharing=sharing)
        self._publish(room.pull_domain_events())

    # ==================== INTERNALS ====================

    async def _write(self, room_id: str, change: Callable[[MeetingRoom], R]) -> tuple[MeetingRoom, R]:
        """
        Load a room, apply ``change`` and save it.

        A change that records no event writes nothing. When the save loses to
        another worker, the change is applied again to a fresh copy, so state
        rules (no joins after the end, the participant cap) are checked against
        what is actually stored.
        """
        attempts = self.policy.write_attempts
        attempt = 0
        async with self.room_lock.hold(room_id):
            while True:
                attempt += 1
                room = await self.get_room(room_id)
                outcome = change(room)
                events = room.pull_domain_events()
                if not events:
                    return room, outcome
                try:
                    saved = await self.repository.save(room)
                except ConcurrencyException:
                    if attempt >= attempts:
                        logger.error(f"Room {room_id} kept changing underneath; giving up after {attempts} attempts")
                        raise
                    logger.info(f"Room {room_id} was written concurrently, replaying (attempt {attempt})")
                    continue
                self._publish(events)
                return saved, outcome

    def _publish(self, events: Sequence[RoomEvent]) -> None:
        if not events:
            return
        self.runner.fire(f"realtime-room:{events[0].room_id}", self.publisher.publish_room_events(list(events)))
