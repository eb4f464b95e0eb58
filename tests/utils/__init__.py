"""Test utilities and helpers."""

from tests.utils.builders import (
    T0,
    AppointmentBuilder,
    MeetingRoomBuilder,
    make_doctor,
    make_organization,
    make_patient,
    make_room_credentials,
)
from tests.utils.fakes import (
    FakeWebSocket,
    InMemoryAppointmentRepository,
    InMemoryDirectory,
    InMemoryMeetingRoomRepository,
    RecordingBroker,
    RecordingCalendar,
    RecordingNotifier,
    RecordingPublisher,
)

__all__ = [
    # Builders
    "T0",
    "AppointmentBuilder",
    "MeetingRoomBuilder",
    "make_doctor",
    "make_organization",
    "make_patient",
    "make_room_credentials",
    # Fakes
    "FakeWebSocket",
    "InMemoryAppointmentRepository",
    "InMemoryDirectory",
    "InMemoryMeetingRoomRepository",
    "RecordingBroker",
    "RecordingCalendar",
    "RecordingNotifier",
    "RecordingPublisher",
]
