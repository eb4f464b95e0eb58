"""
Scheduling API Dependencies

FastAPI dependencies for the scheduling domain.
"""

from app.api.dependencies import Container, DbSession
from app.domains.scheduling.application.use_cases import (
    CancelAppointmentUseCase,
    CreateAppointmentUseCase,
    GetAppointmentUseCase,
    GetAvailableSlotsUseCase,
    ListUserAppointmentsUseCase,
    RespondToInvitationUseCase,
    UpdateAppointmentUseCase,
)


def get_create_appointment_use_case(db: DbSession, container: Container) -> CreateAppointmentUseCase:
    """Get CreateAppointmentUseCase instance with database session."""
    return container.create_create_appointment_use_case(db)


def get_update_appointment_use_case(db: DbSession, container: Container) -> UpdateAppointmentUseCase:
    """Get UpdateAppointmentUseCase instance with database session."""
    return container.create_update_appointment_use_case(db)


def get_cancel_appointment_use_case(db: DbSession, container: Container) -> CancelAppointmentUseCase:
    """Get CancelAppointmentUseCase instance with database session."""
    return container.create_cancel_appointment_use_case(db)


def get_respond_to_invitation_use_case(db: DbSession, container: Container) -> RespondToInvitationUseCase:
    """Get RespondToInvitationUseCase instance with database session."""
    return container.create_respond_to_invitation_use_case(db)


def get_get_appointment_use_case(db: DbSession, container: Container) -> GetAppointmentUseCase:
    """Get GetAppointmentUseCase instance with database session."""
    return container.create_get_appointment_use_case(db)


def get_list_user_appointments_use_case(db: DbSession, container: Container) -> ListUserAppointmentsUseCase:
    """Get ListUserAppointmentsUseCase instance with database session."""
    return container.create_list_user_appointments_use_case(db)


def get_available_slots_use_case(db: DbSession, container: Container) -> GetAvailableSlotsUseCase:
    """Get GetAvailableSlotsUseCase instance with database session."""
    return container.create_get_available_slots_use_case(db)


__all__ = [
    "get_available_slots_use_case",
    "get_cancel_appointment_use_case",
    "get_create_appointment_use_case",
    "get_get_appointment_use_case",
    "get_list_user_appointments_use_case",
    "get_respond_to_invitation_use_case",
    "get_update_appointment_use_case",
]
