"""
Scheduling Domain Value Objects
"""

from .appointment_details import (
    AppointmentDetails,
    InPersonDetails,
    MeetingRoomBinding,
    PhoneDetails,
    VirtualDetails,
)
from .appointment_status import (
    AppointmentStatus,
    AppointmentType,
    InvitationResponse,
    ParticipantRole,
    ParticipantStatus,
)
from .calendar import CalendarAccount, CalendarBinding, ReminderFlags
from .participant import Participant, set_participant_status
from .time_window import TimeWindow, ensure_utc, overlaps, window_of

__all__ = [
    "AppointmentDetails",
    "AppointmentStatus",
    "AppointmentType",
    "CalendarAccount",
    "CalendarBinding",
    "InPersonDetails",
    "InvitationResponse",
    "MeetingRoomBinding",
    "Participant",
    "ParticipantRole",
    "ParticipantStatus",
    "PhoneDetails",
    "ReminderFlags",
    "TimeWindow",
    "VirtualDetails",
    "ensure_utc",
    "overlaps",
    "set_participant_status",
    "window_of",
]
