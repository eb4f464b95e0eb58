"""
Scheduling API Routes

FastAPI router for appointment endpoints.
"""

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import CurrentPrincipal
from app.domains.scheduling.api.dependencies import (
    get_available_slots_use_case,
    get_cancel_appointment_use_case,
    get_create_appointment_use_case,
    get_get_appointment_use_case,
    get_list_user_appointments_use_case,
    get_respond_to_invitation_use_case,
    get_update_appointment_use_case,
)
from app.domains.scheduling.api.schemas import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentUpdateRequest,
    AvailableSlotResponse,
    AvailableSlotsResponse,
    CancelAppointmentRequestBody,
    MessageResponse,
)
from app.domains.scheduling.application.use_cases import (
    CancelAppointmentRequest,
    CancelAppointmentUseCase,
    CreateAppointmentRequest,
    CreateAppointmentUseCase,
    GetAppointmentRequest,
    GetAppointmentUseCase,
    GetAvailableSlotsRequest,
    GetAvailableSlotsUseCase,
    ListUserAppointmentsRequest,
    ListUserAppointmentsUseCase,
    RespondToInvitationRequest,
    RespondToInvitationUseCase,
    UpdateAppointmentRequest,
    UpdateAppointmentUseCase,
)
from app.domains.scheduling.domain.value_objects.appointment_status import InvitationResponse

router = APIRouter(prefix="/appointments", tags=["Appointments"])

# Type aliases for use case dependencies
CreateUseCaseDep = Annotated[CreateAppointmentUseCase, Depends(get_create_appointment_use_case)]
UpdateUseCaseDep = Annotated[UpdateAppointmentUseCase, Depends(get_update_appointment_use_case)]
CancelUseCaseDep = Annotated[CancelAppointmentUseCase, Depends(get_cancel_appointment_use_case)]
RespondUseCaseDep = Annotated[RespondToInvitationUseCase, Depends(get_respond_to_invitation_use_case)]
GetUseCaseDep = Annotated[GetAppointmentUseCase, Depends(get_get_appointment_use_case)]
ListUseCaseDep = Annotated[ListUserAppointmentsUseCase, Depends(get_list_user_appointments_use_case)]
SlotsUseCaseDep = Annotated[GetAvailableSlotsUseCase, Depends(get_available_slots_use_case)]


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreateRequest,
    principal: CurrentPrincipal,
    use_case: CreateUseCaseDep,
):
    """Book an appointment; virtual appointments get a meeting room."""
    appointment = await use_case.execute(
        CreateAppointmentRequest(
            title=body.title,
            description=body.description,
            doctor_id=body.doctor_id,
            patient_id=body.patient_id,
            organization_id=body.organization_id,
            start_time=body.start_time,
            duration_minutes=body.duration,
            appointment_type=body.appointment_type,
            location=body.location,
            timezone=body.timezone,
            created_by=principal.id,
        )
    )
    return AppointmentResponse.from_entity(appointment)


@router.get("/my-appointments", response_model=list[AppointmentResponse])
async def list_my_appointments(
    principal: CurrentPrincipal,
    use_case: ListUseCaseDep,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    type_filter: Annotated[str | None, Query(alias="type")] = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Appointments the caller created or is invited to."""
    appointments = await use_case.execute(
        ListUserAppointmentsRequest(
            user_id=principal.id,
            status=status_filter,
            appointment_type=type_filter,
            start_date=start_date,
            end_date=end_date,
        )
    )
    return [AppointmentResponse.from_entity(a) for a in appointments]


@router.get("/doctor/{doctor_id}/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    doctor_id: str,
    use_case: SlotsUseCaseDep,
    principal: CurrentPrincipal,
    day: Annotated[date, Query(alias="date")],
    duration: int | None = None,
):
    """Free slots of a doctor for one day. Advisory; nothing is reserved."""
    slots = await use_case.execute(GetAvailableSlotsRequest(doctor_id=doctor_id, day=day, duration_minutes=duration))
    return AvailableSlotsResponse(
        doctor_id=doctor_id,
        date=day.isoformat(),
        duration=slots[0].window.duration_minutes if slots else duration,
        slots=[AvailableSlotResponse.from_slot(slot) for slot in slots],
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(appointment_id: str, principal: CurrentPrincipal, use_case: GetUseCaseDep):
    appointment = await use_case.execute(
        GetAppointmentRequest(appointment_id=appointment_id, requester_id=principal.id)
    )
    return AppointmentResponse.from_entity(appointment)


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    body: AppointmentUpdateRequest,
    principal: CurrentPrincipal,
    use_case: UpdateUseCaseDep,
):
    """Edit an appointment. Only its creator may do so."""
    appointment = await use_case.execute(
        UpdateAppointmentRequest(
            appointment_id=appointment_id,
            requester_id=principal.id,
            title=body.title,
            description=body.description,
            notes=body.notes,
            location=body.location,
            start_time=body.start_time,
            duration_minutes=body.duration,
            status=body.status,
        )
    )
    return AppointmentResponse.from_entity(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: str,
    principal: CurrentPrincipal,
    use_case: CancelUseCaseDep,
    body: CancelAppointmentRequestBody | None = None,
):
    appointment = await use_case.execute(
        CancelAppointmentRequest(
            appointment_id=appointment_id,
            requester_id=principal.id,
            reason=body.reason if body else None,
        )
    )
    return AppointmentResponse.from_entity(appointment)


@router.post("/{appointment_id}/accept", response_model=MessageResponse)
async def accept_invitation(appointment_id: str, principal: CurrentPrincipal, use_case: RespondUseCaseDep):
    appointment = await use_case.execute(
        RespondToInvitationRequest(
            appointment_id=appointment_id,
            requester_id=principal.id,
            response=InvitationResponse.ACCEPT.value,
        )
    )
    return MessageResponse(message="Invitation accepted", data={"appointmentId": appointment.id})


@router.post("/{appointment_id}/decline", response_model=MessageResponse)
async def decline_invitation(appointment_id: str, principal: CurrentPrincipal, use_case: RespondUseCaseDep):
    appointment = await use_case.execute(
        RespondToInvitationRequest(
            appointment_id=appointment_id,
            requester_id=principal.id,
            response=InvitationResponse.DECLINE.value,
        )
    )
    return MessageResponse(message="Invitation declined", data={"appointmentId": appointment.id})


__all__ = ["router"]
