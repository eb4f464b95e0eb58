"""
Meetings Domain Container.

Single Responsibility: Wire meeting room repositories and the room manager.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.meetings.application.services import MeetingRoomManager
from app.domains.meetings.domain.services import MeetingRoomPolicy
from app.domains.meetings.infrastructure.repositories import SQLAlchemyMeetingRoomRepository

if TYPE_CHECKING:
    from app.core.container.base import BaseContainer

logger = logging.getLogger(__name__)


class MeetingsContainer:
    """
    Meetings domain container.

    Single Responsibility: Create meeting room repositories and managers.
    """

    def __init__(self, base: "BaseContainer"):
        self._base = base
        settings = base.settings
        self.policy = MeetingRoomPolicy(
            base_url=settings.MEETING_BASE_URL,
            max_participants=settings.MEETING_MAX_PARTICIPANTS,
            restart_resets_started_at=settings.MEETING_RESTART_RESETS_STARTED_AT,
            chat_requires_presence=settings.MEETING_CHAT_REQUIRES_PRESENCE,
        )

    # ==================== REPOSITORIES ====================

    def create_meeting_room_repository(self, db: AsyncSession) -> SQLAlchemyMeetingRoomRepository:
        """Create Meeting Room Repository."""
        return SQLAlchemyMeetingRoomRepository(session=db)

    # ==================== SERVICES ====================

    def create_meeting_room_manager(self, db: AsyncSession) -> MeetingRoomManager:
        """Create MeetingRoomManager bound to a database session."""
        return MeetingRoomManager(
            repository=self.create_meeting_room_repository(db),
            publisher=self._base.get_event_fanout(),
            runner=self._base.side_effect_runner,
            room_lock=self._base.room_lock,
            policy=self.policy,
        )
