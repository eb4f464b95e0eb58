"""
Meeting Room Repository Port
"""

from typing import Protocol, runtime_checkable

from ...domain.entities.meeting_room import MeetingRoom


@runtime_checkable
class IMeetingRoomRepository(Protocol):
    """Interface for meeting room persistence."""

    async def get_by_room_id(self, room_id: str) -> MeetingRoom | None:
        """
        Get a room by its shareable room id.

        Args:
            room_id: Room identifier

        Returns:
            MeetingRoom if found, None otherwise
        """
        ...

    async def add(self, room: MeetingRoom) -> MeetingRoom:
        """
        Stage a new room in the current unit of work without committing.

        Raises:
            DuplicateEntityException: room_id or access_code already taken
        """
        ...

    async def save(self, room: MeetingRoom) -> MeetingRoom:
        """Persist changes to an existing room."""
        ...

    async def save_ended(self, room: MeetingRoom) -> bool:
        """
        Persist an ended room only if it is still active in the store.

        Returns:
            False when another caller ended the room first
        """
        ...

    async def find_active_for_user(self, user_id: str) -> list[MeetingRoom]:
        """Get rooms that have not ended and list user_id as a participant, newest first."""
        ...
