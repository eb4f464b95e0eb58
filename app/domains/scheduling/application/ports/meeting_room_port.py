"""
Meeting Room Provisioner Port

How the scheduler obtains a room for a virtual appointment without
depending on the meetings context directly.
"""

from typing import Protocol, runtime_checkable

from ...domain.value_objects.appointment_details import MeetingRoomBinding


@runtime_checkable
class IMeetingRoomProvisioner(Protocol):
    async def provision_room(self, appointment_id: str, host_id: str) -> MeetingRoomBinding:
        """
        Create the room for an appointment, in the caller's unit of work.

        Args:
            appointment_id: Appointment the room belongs to (1:1)
            host_id: User that hosts the room

        Returns:
            Shareable room coordinates
        """
        ...
