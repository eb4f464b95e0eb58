"""
Base Container - Shared Singletons.

Single Responsibility: Own the process-wide collaborators that every request
shares: locks, the side-effect runner, realtime transport and the outbound
integration clients.
"""

import logging

import redis.asyncio as aioredis

from app.config.settings import Settings, get_settings
from app.core.shared import KeyedLock, SideEffectRunner
from app.integrations.calendar import GoogleCalendarClient
from app.integrations.email import SmtpConfig, SmtpNotificationDispatcher
from app.integrations.realtime import (
    ConnectionManager,
    IRealtimeBroker,
    LocalRealtimeBroker,
    RealtimeEventFanout,
    RedisRealtimeBroker,
)

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    Single Responsibility: Create and cache resources that must be unique per
    process (the per-doctor and per-room locks in particular).
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize base container.

        Args:
            settings: Optional settings override
        """
        self.settings = settings or get_settings()

        self.side_effect_runner = SideEffectRunner()
        self.doctor_schedule_lock = KeyedLock("doctor-schedule")
        self.room_lock = KeyedLock("meeting-room")
        self.connection_manager = ConnectionManager()

        self._broker: IRealtimeBroker | None = None
        self._fanout: RealtimeEventFanout | None = None
        self._calendar_client: GoogleCalendarClient | None = None
        self._notifier: SmtpNotificationDispatcher | None = None

        logger.info("BaseContainer initialized")

    def get_realtime_broker(self) -> IRealtimeBroker:
        """Redis relay when enabled, otherwise delivery stays in this process."""
        if self._broker is None:
            if self.settings.REALTIME_REDIS_ENABLED:
                logger.info(f"Creating RedisRealtimeBroker on channel {self.settings.REALTIME_REDIS_CHANNEL}")
                client = aioredis.from_url(self.settings.redis_url, decode_responses=True)
                self._broker = RedisRealtimeBroker(
                    client,
                    self.connection_manager,
                    redis_channel=self.settings.REALTIME_REDIS_CHANNEL,
                )
            else:
                logger.info("Creating LocalRealtimeBroker")
                self._broker = LocalRealtimeBroker(self.connection_manager)
        return self._broker

    def get_event_fanout(self) -> RealtimeEventFanout:
        if self._fanout is None:
            self._fanout = RealtimeEventFanout(self.get_realtime_broker())
        return self._fanout

    def get_calendar_client(self) -> GoogleCalendarClient:
        if self._calendar_client is None:
            self._calendar_client = GoogleCalendarClient(
                base_url=self.settings.GOOGLE_CALENDAR_API_URL,
                timeout=self.settings.GOOGLE_CALENDAR_TIMEOUT,
            )
        return self._calendar_client

    def get_notification_dispatcher(self) -> SmtpNotificationDispatcher:
        if self._notifier is None:
            self._notifier = SmtpNotificationDispatcher(
                SmtpConfig(
                    server=self.settings.SMTP_SERVER,
                    port=self.settings.SMTP_PORT,
                    username=self.settings.SMTP_USERNAME,
                    password=self.settings.SMTP_PASSWORD,
                    from_email=self.settings.SMTP_FROM_EMAIL,
                    enabled=self.settings.EMAIL_ENABLED,
                )
            )
        return self._notifier

    async def shutdown(self) -> None:
        """Flush background work and close outbound clients."""
        await self.side_effect_runner.drain(timeout=10)
        if self._calendar_client is not None:
            await self._calendar_client.close()
        if isinstance(self._broker, RedisRealtimeBroker):
            await self._broker.stop()
