"""
Meeting Room Provisioner Adapter

Lets the scheduler open a room through the meetings context without
depending on its types.
"""

from app.domains.meetings.application.services.meeting_room_manager import MeetingRoomManager
from app.domains.scheduling.application.ports.meeting_room_port import IMeetingRoomProvisioner
from app.domains.scheduling.domain.value_objects.appointment_details import MeetingRoomBinding


class ManagedMeetingRoomProvisioner(IMeetingRoomProvisioner):
    def __init__(self, manager: MeetingRoomManager):
        self.manager = manager

    async def provision_room(self, appointment_id: str, host_id: str) -> MeetingRoomBinding:
        room = await self.manager.create_room(appointment_id, host_id)
        return MeetingRoomBinding(
            room_id=room.room_id,
            room_link=room.room_link,
            access_code=room.access_code,
            password=room.password,
        )
