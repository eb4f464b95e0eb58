"""
Create Appointment Use Case

Books an appointment for a doctor and a patient, guaranteeing that the
doctor is never double-booked.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.domain import (
    AppointmentConflictException,
    EntityNotFoundException,
    ValidationException,
    generate_uuid_str,
)
from app.core.shared import KeyedLock

from ...domain.entities.appointment import Appointment
from ...domain.value_objects.appointment_details import (
    AppointmentDetails,
    InPersonDetails,
    PhoneDetails,
    VirtualDetails,
)
from ...domain.value_objects.appointment_status import AppointmentType
from ...domain.value_objects.time_window import window_of
from ..ports.appointment_repository import IAppointmentRepository
from ..ports.directory_repository import IDoctorRepository, IOrganizationRepository, IPatientRepository
from ..ports.meeting_room_port import IMeetingRoomProvisioner
from ..services.appointment_side_effects import AppointmentSideEffects

logger = logging.getLogger(__name__)


@dataclass
class CreateAppointmentRequest:
    """Request for creating an appointment."""

    title: str | None
    doctor_id: str | None
    patient_id: str | None
    start_time: datetime | None
    duration_minutes: int | None
    created_by: str
    appointment_type: str = AppointmentType.IN_PERSON.value
    organization_id: str | None = None
    description: str | None = None
    location: str | None = None
    timezone: str | None = None


def validate_timezone(name: str | None) -> str:
    if not name:
        return "UTC"
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationException(f"Unknown timezone: {name}", field="timezone") from e
    return name


class CreateAppointmentUseCase:
    """
    Use case for creating appointments.

    The conflict check and the insert run under a per-doctor lock (and the
    repository's transaction-scoped schedule lock), so two concurrent creates
    for the same doctor cannot both pass the check.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        doctor_repository: IDoctorRepository,
        patient_repository: IPatientRepository,
        organization_repository: IOrganizationRepository,
        room_provisioner: IMeetingRoomProvisioner,
        side_effects: AppointmentSideEffects,
        schedule_lock: KeyedLock,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            appointment_repository: Repository for appointment data access
            doctor_repository: Doctor directory
            patient_repository: Patient directory
            organization_repository: Organization directory
            room_provisioner: Creates meeting rooms for virtual appointments
            side_effects: Notification, calendar and realtime collaborators
            schedule_lock: Per-doctor lock shared by create and update
            clock: Time source
        """
        self.appointment_repo = appointment_repository
        self.doctor_repo = doctor_repository
        self.patient_repo = patient_repository
        self.organization_repo = organization_repository
        self.room_provisioner = room_provisioner
        self.side_effects = side_effects
        self.schedule_lock = schedule_lock
        self.clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, request: CreateAppointmentRequest) -> Appointment:
        """
        Execute appointment creation.

        Args:
            request: Creation parameters

        Returns:
            The persisted appointment, with room and calendar bindings populated

        Raises:
            ValidationException: Missing or malformed input
            EntityNotFoundException: Doctor, patient or organization absent
            AppointmentConflictException: Doctor already booked in the window
        """
        # 1. Validate input
        self._require_fields(request)
        timezone = validate_timezone(request.timezone)
        try:
            appointment_type = AppointmentType.from_string(request.appointment_type)
        except ValueError as e:
            raise ValidationException(str(e), field="appointment_type") from e
        window = window_of(request.start_time, request.duration_minutes)

        # 2. Resolve parties
        doctor = await self.doctor_repo.get_by_id(request.doctor_id)
        if doctor is None:
            raise EntityNotFoundException(entity_type="Doctor", entity_id=request.doctor_id)
        patient = await self.patient_repo.get_by_id(request.patient_id)
        if patient is None:
            raise EntityNotFoundException(entity_type="Patient", entity_id=request.patient_id)
        if request.organization_id:
            organization = await self.organization_repo.get_by_id(request.organization_id)
            if organization is None:
                raise EntityNotFoundException(entity_type="Organization", entity_id=request.organization_id)

        # 3. Check and write under the doctor's schedule lock
        async with self.schedule_lock.hold(str(doctor.id)):
            await self.appointment_repo.lock_doctor_schedule(str(doctor.id))

            conflicts = await self.appointment_repo.find_conflicts(str(doctor.id), window)
            if conflicts:
                logger.warning(
                    f"Rejected appointment for doctor {doctor.id} at {window}: "
                    f"overlaps {[c.id for c in conflicts]}"
                )
                raise AppointmentConflictException(
                    doctor_id=str(doctor.id),
                    time_slot=str(window),
                    conflicting_ids=[str(c.id) for c in conflicts],
                )

            appointment_id = generate_uuid_str()
            details = await self._build_details(appointment_type, appointment_id, doctor.user_id, request.location)

            appointment = Appointment.schedule(
                appointment_id=appointment_id,
                title=request.title,
                description=request.description,
                doctor=doctor,
                patient=patient,
                organization_id=request.organization_id,
                start_time=window.start,
                duration_minutes=request.duration_minutes,
                details=details,
                created_by=request.created_by,
                timezone=timezone,
                now=self.clock(),
            )
            events = appointment.pull_domain_events()
            saved = await self.appointment_repo.save(appointment)

        logger.info(
            f"Appointment created: {saved.id} ({saved.appointment_type.value}) "
            f"doctor={saved.doctor_id} patient={saved.patient_id} window={saved.window}"
        )

        # 4. Best-effort side effects
        self.side_effects.invite(saved)
        binding = await self.side_effects.create_calendar_event(saved, doctor)
        if binding is not None:
            # The booking itself is already committed
            try:
                saved.bind_calendar(binding)
                saved = await self.appointment_repo.save(saved)
            except Exception as e:
                logger.error(f"Calendar event {binding.external_event_id} not stored on appointment {saved.id}: {e}")
                saved.unbind_calendar()
        self.side_effects.publish(events)

        return saved

    @staticmethod
    def _require_fields(request: CreateAppointmentRequest) -> None:
        required = {
            "title": request.title.strip() if request.title else None,
            "doctor_id": request.doctor_id,
            "patient_id": request.patient_id,
            "start_time": request.start_time,
            "duration": request.duration_minutes,
        }
        missing = [name for name, value in required.items() if value in (None, "")]
        if missing:
            raise ValidationException(
                f"Missing required fields: {', '.join(missing)}",
                details={"missing": missing},
            )

    async def _build_details(
        self,
        appointment_type: AppointmentType,
        appointment_id: str,
        host_id: str,
        location: str | None,
    ) -> AppointmentDetails:
        if appointment_type == AppointmentType.VIRTUAL:
            room = await self.room_provisioner.provision_room(appointment_id, host_id)
            return VirtualDetails(room=room)
        if appointment_type == AppointmentType.PHONE:
            return PhoneDetails()
        return InPersonDetails(location=location)
