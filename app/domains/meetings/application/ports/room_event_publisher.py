"""
Room Event Publisher Port
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ...domain.events import RoomEvent


@runtime_checkable
class IRoomEventPublisher(Protocol):
    async def publish_room_events(self, events: Sequence[RoomEvent]) -> None:
        """Broadcast room events to the room's channel."""
        ...
