"""
Scheduling Domain Container.

Single Responsibility: Wire all scheduling domain dependencies.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.scheduling.application.services import AppointmentSideEffects
from app.domains.scheduling.application.use_cases import (
    CancelAppointmentUseCase,
    CreateAppointmentUseCase,
    GetAppointmentUseCase,
    GetAvailableSlotsUseCase,
    ListUserAppointmentsUseCase,
    RespondToInvitationUseCase,
    SendAppointmentRemindersUseCase,
    UpdateAppointmentUseCase,
)
from app.domains.scheduling.domain.services import AvailabilityService, WorkingHours
from app.domains.scheduling.infrastructure.adapters import ManagedMeetingRoomProvisioner
from app.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyAppointmentRepository,
    SQLAlchemyDoctorRepository,
    SQLAlchemyOrganizationRepository,
    SQLAlchemyPatientRepository,
)

if TYPE_CHECKING:
    from app.core.container.base import BaseContainer
    from app.core.container.meetings import MeetingsContainer

logger = logging.getLogger(__name__)


class SchedulingContainer:
    """
    Scheduling domain container.

    Single Responsibility: Create scheduling repositories and use cases.
    """

    def __init__(self, base: "BaseContainer", meetings: "MeetingsContainer"):
        """
        Initialize scheduling container.

        Args:
            base: BaseContainer with shared singletons
            meetings: Meetings container, used to provision rooms for virtual appointments
        """
        self._base = base
        self._meetings = meetings
        settings = base.settings
        self.working_hours = WorkingHours(
            opens_at=settings.SCHEDULING_WORKDAY_START,
            closes_at=settings.SCHEDULING_WORKDAY_END,
            step_minutes=settings.SCHEDULING_SLOT_STEP_MINUTES,
            clip_to_close=settings.SCHEDULING_CLIP_SLOTS_TO_CLOSE,
            timezone=settings.SCHEDULING_TIMEZONE,
        )
        self._side_effects: AppointmentSideEffects | None = None

    # ==================== REPOSITORIES ====================

    def create_appointment_repository(self, db: AsyncSession) -> SQLAlchemyAppointmentRepository:
        """Create Appointment Repository."""
        return SQLAlchemyAppointmentRepository(session=db)

    def create_doctor_repository(self, db: AsyncSession) -> SQLAlchemyDoctorRepository:
        """Create Doctor Repository."""
        return SQLAlchemyDoctorRepository(session=db)

    def create_patient_repository(self, db: AsyncSession) -> SQLAlchemyPatientRepository:
        """Create Patient Repository."""
        return SQLAlchemyPatientRepository(session=db)

    def create_organization_repository(self, db: AsyncSession) -> SQLAlchemyOrganizationRepository:
        """Create Organization Repository."""
        return SQLAlchemyOrganizationRepository(session=db)

    # ==================== SERVICES ====================

    def get_side_effects(self) -> AppointmentSideEffects:
        """Side effects are stateless apart from the shared runner, so one instance serves all requests."""
        if self._side_effects is None:
            settings = self._base.settings
            self._side_effects = AppointmentSideEffects(
                notifier=self._base.get_notification_dispatcher(),
                calendar=self._base.get_calendar_client(),
                publisher=self._base.get_event_fanout(),
                runner=self._base.side_effect_runner,
                frontend_url=settings.FRONTEND_URL,
                calendar_enabled=settings.GOOGLE_CALENDAR_ENABLED,
            )
        return self._side_effects

    def create_availability_service(self) -> AvailabilityService:
        return AvailabilityService(
            self.working_hours,
            default_duration_minutes=self._base.settings.SCHEDULING_DEFAULT_SLOT_MINUTES,
        )

    # ==================== USE CASES ====================

    def create_create_appointment_use_case(self, db: AsyncSession) -> CreateAppointmentUseCase:
        """Create CreateAppointmentUseCase with dependencies."""
        return CreateAppointmentUseCase(
            appointment_repository=self.create_appointment_repository(db),
            doctor_repository=self.create_doctor_repository(db),
            patient_repository=self.create_patient_repository(db),
            organization_repository=self.create_organization_repository(db),
            room_provisioner=ManagedMeetingRoomProvisioner(self._meetings.create_meeting_room_manager(db)),
            side_effects=self.get_side_effects(),
            schedule_lock=self._base.doctor_schedule_lock,
        )

    def create_update_appointment_use_case(self, db: AsyncSession) -> UpdateAppointmentUseCase:
        """Create UpdateAppointmentUseCase with dependencies."""
        return UpdateAppointmentUseCase(
            appointment_repository=self.create_appointment_repository(db),
            doctor_repository=self.create_doctor_repository(db),
            side_effects=self.get_side_effects(),
            schedule_lock=self._base.doctor_schedule_lock,
        )

    def create_cancel_appointment_use_case(self, db: AsyncSession) -> CancelAppointmentUseCase:
        """Create CancelAppointmentUseCase with dependencies."""
        return CancelAppointmentUseCase(
            appointment_repository=self.create_appointment_repository(db),
            doctor_repository=self.create_doctor_repository(db),
            side_effects=self.get_side_effects(),
        )

    def create_respond_to_invitation_use_case(self, db: AsyncSession) -> RespondToInvitationUseCase:
        """Create RespondToInvitationUseCase with dependencies."""
        return RespondToInvitationUseCase(
            appointment_repository=self.create_appointment_repository(db),
            side_effects=self.get_side_effects(),
        )

    def create_get_appointment_use_case(self, db: AsyncSession) -> GetAppointmentUseCase:
        """Create GetAppointmentUseCase with dependencies."""
        return GetAppointmentUseCase(appointment_repository=self.create_appointment_repository(db))

    def create_list_user_appointments_use_case(self, db: AsyncSession) -> ListUserAppointmentsUseCase:
        """Create ListUserAppointmentsUseCase with dependencies."""
        return ListUserAppointmentsUseCase(appointment_repository=self.create_appointment_repository(db))

    def create_get_available_slots_use_case(self, db: AsyncSession) -> GetAvailableSlotsUseCase:
        """Create GetAvailableSlotsUseCase with dependencies."""
        return GetAvailableSlotsUseCase(
            appointment_repository=self.create_appointment_repository(db),
            doctor_repository=self.create_doctor_repository(db),
            availability_service=self.create_availability_service(),
        )

    def create_send_reminders_use_case(self, db: AsyncSession) -> SendAppointmentRemindersUseCase:
        """Create SendAppointmentRemindersUseCase with dependencies."""
        return SendAppointmentRemindersUseCase(
            appointment_repository=self.create_appointment_repository(db),
            side_effects=self.get_side_effects(),
            lead_minutes=self._base.settings.REMINDER_LEAD_MINUTES,
        )
