"""
Dependency Injection Container.

Centralized container for creating and managing all application dependencies.
Implements Dependency Inversion Principle by wiring concrete implementations to interfaces.

This module is the facade that composes the domain-specific containers.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings
from app.database.async_db import get_async_db_context

from .base import BaseContainer
from .meetings import MeetingsContainer
from .scheduling import SchedulingContainer

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container (Facade).

    Single Responsibility: Compose and delegate to domain-specific containers.
    Singleton Pattern: Keeps one set of locks and one realtime transport per process.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize container with all domain sub-containers.

        Args:
            settings: Optional settings override
        """
        self._base = BaseContainer(settings)
        self._meetings = MeetingsContainer(self._base)
        self._scheduling = SchedulingContainer(self._base, self._meetings)

        logger.info("DependencyContainer initialized with all domain containers")

    @property
    def settings(self) -> Settings:
        return self._base.settings

    @property
    def base(self) -> BaseContainer:
        return self._base

    # ============================================================
    # SHARED (delegated to BaseContainer)
    # ============================================================

    @property
    def connection_manager(self):
        return self._base.connection_manager

    def get_realtime_broker(self):
        return self._base.get_realtime_broker()

    def get_event_fanout(self):
        return self._base.get_event_fanout()

    @property
    def side_effect_runner(self):
        return self._base.side_effect_runner

    # ============================================================
    # SCHEDULING (delegated to SchedulingContainer)
    # ============================================================

    def create_create_appointment_use_case(self, db: AsyncSession):
        return self._scheduling.create_create_appointment_use_case(db)

    def create_update_appointment_use_case(self, db: AsyncSession):
        return self._scheduling.create_update_appointment_use_case(db)

    def create_cancel_appointment_use_case(self, db: AsyncSession):
        return self._scheduling.create_cancel_appointment_use_case(db)

    def create_respond_to_invitation_use_case(self, db: AsyncSession):
        return self._scheduling.create_respond_to_invitation_use_case(db)

    def create_get_appointment_use_case(self, db: AsyncSession):
        return self._scheduling.create_get_appointment_use_case(db)

    def create_list_user_appointments_use_case(self, db: AsyncSession):
        return self._scheduling.create_list_user_appointments_use_case(db)

    def create_get_available_slots_use_case(self, db: AsyncSession):
        return self._scheduling.create_get_available_slots_use_case(db)

    def create_send_reminders_use_case(self, db: AsyncSession):
        return self._scheduling.create_send_reminders_use_case(db)

    async def run_reminder_sweep(self) -> int:
        """One reminder pass in its own session; used by the ReminderScheduler."""
        async with get_async_db_context() as db:
            use_case = self.create_send_reminders_use_case(db)
            reminded = await use_case.execute()
        return len(reminded)

    # ============================================================
    # MEETINGS (delegated to MeetingsContainer)
    # ============================================================

    def create_meeting_room_manager(self, db: AsyncSession):
        return self._meetings.create_meeting_room_manager(db)

    async def shutdown(self) -> None:
        await self._base.shutdown()


# ============================================================
# GLOBAL CONTAINER INSTANCE
# ============================================================

_container: DependencyContainer | None = None


def get_container(settings: Settings | None = None) -> DependencyContainer:
    """
    Get global container instance (singleton).

    Args:
        settings: Optional settings (only used on first call)

    Returns:
        DependencyContainer instance
    """
    global _container

    if _container is None:
        logger.info("Initializing global DependencyContainer")
        _container = DependencyContainer(settings)
    elif settings is not None and settings is not _container.settings:
        logger.warning(
            "Container already initialized, ignoring new settings. "
            "Call reset_container() first to change settings."
        )

    return _container


def reset_container() -> None:
    """
    Reset global container instance.

    Useful for testing or reconfiguration.
    """
    global _container
    logger.info("Resetting global DependencyContainer")
    _container = None


__all__ = [
    "BaseContainer",
    "DependencyContainer",
    "MeetingsContainer",
    "SchedulingContainer",
    "get_container",
    "reset_container",
]
