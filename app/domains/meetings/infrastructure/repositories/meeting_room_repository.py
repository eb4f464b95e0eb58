"""
Meeting Room Repository Implementation

SQLAlchemy implementation of IMeetingRoomRepository.
"""

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException, DuplicateEntityException
from app.domains.meetings.application.ports.meeting_room_repository import IMeetingRoomRepository
from app.domains.meetings.domain.entities.meeting_room import ChatMessage, MeetingRoom, RoomParticipant
from app.domains.meetings.domain.value_objects.room_settings import RoomSettings
from app.domains.meetings.infrastructure.persistence.sqlalchemy.models import MeetingRoomModel

logger = logging.getLogger(__name__)


class SQLAlchemyMeetingRoomRepository(IMeetingRoomRepository):
    """
    SQLAlchemy implementation of meeting room repository.

    ``add`` only flushes inside a savepoint so a credential clash can be
    retried without losing the surrounding transaction.

    Every write after that is conditional. ``save`` matches the version the
    room was read with, and ``save_ended`` matches an active row and bumps the
    stored version, so a join or chat computed from a copy read before another
    worker ended the room cannot bring it back to life.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_room_id(self, room_id: str) -> MeetingRoom | None:
        # Overwrite identity-map copies; a lost conditional write leaves them stale
        result = await self.session.execute(
            select(MeetingRoomModel)
            .where(MeetingRoomModel.room_id == room_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def add(self, room: MeetingRoom) -> MeetingRoom:
        model = self._to_model(room)
        try:
            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Meeting room insert rejected: {e.orig}")
            raise DuplicateEntityException(entity_type="MeetingRoom", field="room_id", value=room.room_id) from e
        return self._to_entity(model)

    async def save(self, room: MeetingRoom) -> MeetingRoom:
        expected_version = room.version
        room.increment_version()
        result = await self.session.execute(
            update(MeetingRoomModel)
            .where(
                MeetingRoomModel.room_id == room.room_id,
                MeetingRoomModel.version == expected_version,
            )
            .values(**self._column_values(room))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.session.rollback()
            room.version = expected_version
            raise ConcurrencyException("MeetingRoom", room.room_id, expected_version)

        await self.session.commit()
        return room

    async def save_ended(self, room: MeetingRoom) -> bool:
        """Conditional update; only the caller that flips is_active wins."""
        result = await self.session.execute(
            update(MeetingRoomModel)
            .where(
                MeetingRoomModel.room_id == room.room_id,
                MeetingRoomModel.is_active.is_(True),
            )
            .values(
                is_active=False,
                ended_at=room.ended_at,
                total_duration=room.total_duration,
                recording_id=room.recording_id,
                started_at=room.started_at,
                version=MeetingRoomModel.version + 1,
                updated_at=room.updated_at,
            )
            .returning(MeetingRoomModel.version)
            .execution_options(synchronize_session=False)
        )
        stored_version = result.scalar_one_or_none()
        await self.session.commit()
        if stored_version is None:
            return False
        room.version = stored_version
        return True

    async def find_active_for_user(self, user_id: str) -> list[MeetingRoom]:
        result = await self.session.execute(
            select(MeetingRoomModel)
            .where(
                MeetingRoomModel.ended_at.is_(None),
                MeetingRoomModel.participants.contains([{"user_id": user_id}]),
            )
            .order_by(MeetingRoomModel.created_at.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    # Mapping methods

    def _to_entity(self, model: MeetingRoomModel) -> MeetingRoom:
        return MeetingRoom(
            id=model.id,  # type: ignore[arg-type]
            room_id=model.room_id,  # type: ignore[arg-type]
            room_name=model.room_name or "",  # type: ignore[arg-type]
            room_link=model.room_link or "",  # type: ignore[arg-type]
            access_code=model.access_code,  # type: ignore[arg-type]
            password=model.password,  # type: ignore[arg-type]
            host_id=model.host_id,  # type: ignore[arg-type]
            appointment_id=model.appointment_id,  # type: ignore[arg-type]
            is_active=bool(model.is_active),
            started_at=model.started_at,  # type: ignore[arg-type]
            ended_at=model.ended_at,  # type: ignore[arg-type]
            is_recording=bool(model.is_recording),
            recording_id=model.recording_id,  # type: ignore[arg-type]
            participants=[RoomParticipant.from_dict(p) for p in (model.participants or [])],
            chat_history=[ChatMessage.from_dict(c) for c in (model.chat_history or [])],
            settings=RoomSettings.from_dict(model.settings),  # type: ignore[arg-type]
            total_duration=model.total_duration,  # type: ignore[arg-type]
            peak_participants=model.peak_participants or 0,  # type: ignore[arg-type]
            version=model.version or 0,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _to_model(self, room: MeetingRoom) -> MeetingRoomModel:
        return MeetingRoomModel(
            id=room.id,
            room_id=room.room_id,
            access_code=room.access_code,
            host_id=room.host_id,
            appointment_id=room.appointment_id,
            created_at=room.created_at,
            **self._column_values(room),
        )

    @staticmethod
    def _column_values(room: MeetingRoom) -> dict[str, Any]:
        return {
            "room_name": room.room_name,
            "room_link": room.room_link,
            "password": room.password,
            "is_active": room.is_active,
            "started_at": room.started_at,
            "ended_at": room.ended_at,
            "is_recording": room.is_recording,
            "recording_id": room.recording_id,
            "participants": [p.to_dict() for p in room.participants],
            "chat_history": [c.to_dict() for c in room.chat_history],
            "settings": room.settings.to_dict(),
            "total_duration": room.total_duration,
            "peak_participants": room.peak_participants,
            "version": room.version,
            "updated_at": room.updated_at,
        }
