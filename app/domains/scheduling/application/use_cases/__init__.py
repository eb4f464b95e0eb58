"""
Scheduling Use Cases
"""

from .cancel_appointment import CancelAppointmentRequest, CancelAppointmentUseCase
from .create_appointment import CreateAppointmentRequest, CreateAppointmentUseCase
from .get_appointment import GetAppointmentRequest, GetAppointmentUseCase
from .get_available_slots import GetAvailableSlotsRequest, GetAvailableSlotsUseCase
from .list_user_appointments import ListUserAppointmentsRequest, ListUserAppointmentsUseCase
from .respond_to_invitation import RespondToInvitationRequest, RespondToInvitationUseCase
from .send_reminders import SendAppointmentRemindersUseCase
from .update_appointment import UpdateAppointmentRequest, UpdateAppointmentUseCase

__all__ = [
    "CancelAppointmentRequest",
    "CancelAppointmentUseCase",
    "CreateAppointmentRequest",
    "CreateAppointmentUseCase",
    "GetAppointmentRequest",
    "GetAppointmentUseCase",
    "GetAvailableSlotsRequest",
    "GetAvailableSlotsUseCase",
    "ListUserAppointmentsRequest",
    "ListUserAppointmentsUseCase",
    "RespondToInvitationRequest",
    "RespondToInvitationUseCase",
    "SendAppointmentRemindersUseCase",
    "UpdateAppointmentRequest",
    "UpdateAppointmentUseCase",
]
