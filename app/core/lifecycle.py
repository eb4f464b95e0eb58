"""
Startup and shutdown of the process-wide resources.

On startup: optional table creation, a database ping, the Redis relay for
realtime events and the reminder scheduler. Shutdown releases them in reverse.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.container import DependencyContainer, get_container
from app.database.async_db import check_db_connection, close_db, init_db
from app.domains.scheduling.infrastructure.scheduler import ReminderScheduler
from app.integrations.realtime import RedisRealtimeBroker

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Runs startup once and shutdown once for a container."""

    def __init__(self, container: DependencyContainer) -> None:
        self._container = container
        settings = container.settings
        self._reminder_scheduler = ReminderScheduler(
            job=container.run_reminder_sweep,
            interval_seconds=settings.REMINDER_CHECK_INTERVAL_SECONDS,
            enabled=settings.REMINDERS_ENABLED,
        )
        self._initialized = False

    @property
    def reminder_scheduler(self) -> ReminderScheduler:
        return self._reminder_scheduler

    async def startup(self) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting scheduling service resources")
        settings = self._container.settings

        if settings.DB_AUTO_CREATE:
            await init_db()
        if not await check_db_connection():
            logger.warning("Database not reachable at startup")

        self._log_disabled_integrations()

        broker = self._container.get_realtime_broker()
        if isinstance(broker, RedisRealtimeBroker):
            await broker.start()

        await self._reminder_scheduler.start()

        self._initialized = True
        logger.info("Scheduling service ready")

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Releasing scheduling service resources")

        await self._reminder_scheduler.stop()
        await self._container.shutdown()
        await close_db()

        self._initialized = False
        logger.info("Scheduling service stopped")

    def _log_disabled_integrations(self) -> None:
        """Log which optional integrations are active."""
        settings = self._container.settings
        if not settings.EMAIL_ENABLED:
            logger.info("E-mail notifications disabled via EMAIL_ENABLED=False")
        if not settings.GOOGLE_CALENDAR_ENABLED:
            logger.info("Calendar sync disabled via GOOGLE_CALENDAR_ENABLED=False")
        if not settings.REALTIME_REDIS_ENABLED:
            logger.info("Realtime events are delivered in-process only")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container = getattr(app.state, "container", None) or get_container()
    lifecycle = LifecycleManager(container)
    app.state.lifecycle = lifecycle

    await lifecycle.startup()

    yield

    await lifecycle.shutdown()
