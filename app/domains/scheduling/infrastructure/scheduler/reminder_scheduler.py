"""Reminder Scheduler for Appointments.

APScheduler-based async scheduler that periodically sends reminders for
appointments starting within the reminder lead time.
"""

import logging
from collections.abc import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-not-found]
from apscheduler.triggers.interval import IntervalTrigger  # type: ignore[import-not-found]

logger = logging.getLogger(__name__)

ReminderJob = Callable[[], Awaitable[int]]


class ReminderScheduler:
    """Runs the reminder sweep on a fixed interval.

    The sweep itself is injected: it opens its own database session, runs
    SendAppointmentRemindersUseCase and returns how many reminders went out.
    """

    def __init__(
        self,
        job: ReminderJob,
        interval_seconds: int = 300,
        enabled: bool = True,
    ):
        """Initialize scheduler.

        Args:
            job: Coroutine factory performing one reminder sweep.
            interval_seconds: Seconds between sweeps.
            enabled: Whether scheduler is enabled.
        """
        self.job = job
        self.interval_seconds = interval_seconds
        self.enabled = enabled

        self._scheduler: AsyncIOScheduler | None = None
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def start(self) -> None:
        """Start the scheduler."""
        if not self.enabled:
            logger.info("ReminderScheduler is disabled, skipping start")
            return

        if self._is_running:
            logger.warning("ReminderScheduler already running")
            return

        scheduler = AsyncIOScheduler()
        self._scheduler = scheduler

        scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self.interval_seconds),
            id="appointment_reminders",
            replace_existing=True,
            name="Appointment Reminders",
            max_instances=1,
            coalesce=True,
        )

        scheduler.start()
        self._is_running = True
        logger.info(f"ReminderScheduler started (interval={self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("ReminderScheduler stopped")

    async def run_once(self) -> int:
        """Run one sweep. Errors are logged so the next interval still fires."""
        logger.info("Starting appointment reminder job")
        try:
            sent = await self.job()
        except Exception as e:
            logger.error(f"Error sending appointment reminders: {e}", exc_info=True)
            return 0

        if sent:
            logger.info(f"Sent {sent} appointment reminders")
        else:
            logger.debug("No appointments due for a reminder")
        return sent
