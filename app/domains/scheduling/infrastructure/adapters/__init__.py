"""
Scheduling Infrastructure Adapters
"""

from .meeting_room_provisioner import ManagedMeetingRoomProvisioner

__all__ = ["ManagedMeetingRoomProvisioner"]
