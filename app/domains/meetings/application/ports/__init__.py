"""
Meetings Application Ports
"""

from .meeting_room_repository import IMeetingRoomRepository
from .room_event_publisher import IRoomEventPublisher

__all__ = [
    "IMeetingRoomRepository",
    "IRoomEventPublisher",
]
