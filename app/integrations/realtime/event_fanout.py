"""
Realtime Event Fan-out

Turns scheduling and meeting domain events into channel messages.
Delivery is best-effort and at-most-once; clients re-fetch state on reconnect.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from app.domains.meetings.domain.events import RoomEvent
from app.domains.scheduling.domain.events import AppointmentEvent, AppointmentReminderDue

from .brokers import IRealtimeBroker

logger = logging.getLogger(__name__)

APPOINTMENT_UPDATED = "appointment-updated"
APPOINTMENT_REMINDER = "appointment-reminder"


def appointment_channel(user_id: str) -> str:
    return f"appointments-{user_id}"


def meeting_channel(room_id: str) -> str:
    return f"meeting-{room_id}"


class RealtimeEventFanout:
    """Publishes appointment events per user and room events per room."""

    def __init__(self, broker: IRealtimeBroker):
        self.broker = broker

    async def publish(self, events: Sequence[AppointmentEvent]) -> None:
        for event in events:
            name, payload = self._appointment_message(event)
            for user_id in event.audience:
                await self._send(appointment_channel(user_id), name, payload)

    async def publish_room_events(self, events: Sequence[RoomEvent]) -> None:
        for event in events:
            await self._send(meeting_channel(event.room_id), event.event_name, event.payload())

    @staticmethod
    def _appointment_message(event: AppointmentEvent) -> tuple[str, dict[str, Any]]:
        timestamp = event.occurred_at.astimezone(UTC).isoformat()
        if isinstance(event, AppointmentReminderDue):
            return APPOINTMENT_REMINDER, {
                "appointmentId": event.appointment_id,
                "message": event.message,
                "data": event.snapshot,
                "timestamp": timestamp,
            }
        return APPOINTMENT_UPDATED, {
            "type": event.change_type,
            "appointmentId": event.appointment_id,
            "data": event.snapshot,
            "timestamp": timestamp,
        }

    async def _send(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        try:
            await self.broker.publish(channel, event, payload)
        except Exception as e:
            logger.error(f"Realtime publish of {event} to {channel} failed: {e}")

    async def notify(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        """Publish an ad-hoc event that has no domain counterpart."""
        await self._send(channel, event, {**payload, "timestamp": datetime.now(UTC).isoformat()})
