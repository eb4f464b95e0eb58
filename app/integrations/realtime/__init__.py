"""
Realtime Integration

WebSocket channels, brokers and the domain event fan-out.
"""

from .brokers import IRealtimeBroker, LocalRealtimeBroker, RedisRealtimeBroker, envelope
from .connection_manager import ConnectionManager
from .event_fanout import (
    APPOINTMENT_REMINDER,
    APPOINTMENT_UPDATED,
    RealtimeEventFanout,
    appointment_channel,
    meeting_channel,
)

__all__ = [
    "APPOINTMENT_REMINDER",
    "APPOINTMENT_UPDATED",
    "ConnectionManager",
    "IRealtimeBroker",
    "LocalRealtimeBroker",
    "RealtimeEventFanout",
    "RedisRealtimeBroker",
    "appointment_channel",
    "envelope",
    "meeting_channel",
]
