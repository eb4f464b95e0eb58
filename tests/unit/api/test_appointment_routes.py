"""
API tests for the appointment endpoints.

Use cases are wired to in-memory repositories through FastAPI dependency
overrides; authentication goes through the real middleware with a signed
test token.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import status

from app.core.shared import KeyedLock
from app.domains.scheduling.api.dependencies import (
    get_available_slots_use_case,
    get_cancel_appointment_use_case,
    get_create_appointment_use_case,
    get_get_appointment_use_case,
    get_list_user_appointments_use_case,
    get_respond_to_invitation_use_case,
    get_update_appointment_use_case,
)
from app.domains.scheduling.application.use_cases import (
    CancelAppointmentUseCase,
    CreateAppointmentUseCase,
    GetAppointmentUseCase,
    GetAvailableSlotsUseCase,
    ListUserAppointmentsUseCase,
    RespondToInvitationUseCase,
    UpdateAppointmentUseCase,
)
from app.domains.scheduling.domain.services import AvailabilityService
from tests.utils import T0, AppointmentBuilder

API = "/api/v1/appointments"
DOCTOR_USER = "user-doctor-1"
PATIENT_USER = "user-patient-1"
START = T0 + timedelta(days=1)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def wired_app(fastapi_app, appointment_repository, directory, side_effects, clock):
    """Application whose scheduling use cases run against in-memory stores."""
    schedule_lock = KeyedLock("doctor-schedule")
    overrides = {
        get_create_appointment_use_case: lambda: CreateAppointmentUseCase(
            appointment_repository=appointment_repository,
            doctor_repository=directory.doctor_repository,
            patient_repository=directory.patient_repository,
            organization_repository=directory.organization_repository,
            room_provisioner=AsyncMock(),
            side_effects=side_effects,
            schedule_lock=schedule_lock,
            clock=clock,
        ),
        get_update_appointment_use_case: lambda: UpdateAppointmentUseCase(
            appointment_repository=appointment_repository,
            doctor_repository=directory.doctor_repository,
            side_effects=side_effects,
            schedule_lock=schedule_lock,
            clock=clock,
        ),
        get_cancel_appointment_use_case: lambda: CancelAppointmentUseCase(
            appointment_repository=appointment_repository,
            doctor_repository=directory.doctor_repository,
            side_effects=side_effects,
            clock=clock,
        ),
        get_respond_to_invitation_use_case: lambda: RespondToInvitationUseCase(
            appointment_repository=appointment_repository,
            side_effects=side_effects,
            clock=clock,
        ),
        get_get_appointment_use_case: lambda: GetAppointmentUseCase(appointment_repository=appointment_repository),
        get_list_user_appointments_use_case: lambda: ListUserAppointmentsUseCase(
            appointment_repository=appointment_repository
        ),
        get_available_slots_use_case: lambda: GetAvailableSlotsUseCase(
            appointment_repository=appointment_repository,
            doctor_repository=directory.doctor_repository,
            availability_service=AvailabilityService(),
        ),
    }
    fastapi_app.dependency_overrides.update(overrides)
    return fastapi_app


@pytest.fixture
def client(wired_app, api_client):
    return api_client


def create_body(**overrides):
    body = {
        "title": "Follow-up",
        "doctorId": "doctor-1",
        "patientId": "patient-1",
        "startTime": START.isoformat(),
        "duration": 30,
        "location": "Room 4",
    }
    body.update(overrides)
    return body


# ============================================================================
# Authentication
# ============================================================================


class TestAuthentication:
    def test_missing_token_is_rejected(self, client):
        response = client.get(f"{API}/my-appointments")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_invalid_token_is_rejected(self, client):
        response = client.get(f"{API}/my-appointments", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_health_is_public(self, client):
        assert client.get("/health").status_code == status.HTTP_200_OK


# ============================================================================
# Create
# ============================================================================


class TestCreateAppointment:
    def test_create_returns_201(self, client, auth_headers):
        response = client.post(API, json=create_body(), headers=auth_headers(DOCTOR_USER))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["duration"] == 30
        assert data["location"] == "Room 4"
        assert data["created_by"] == DOCTOR_USER
        assert [p["role"] for p in data["participants"]] == ["doctor", "patient"]

    def test_overlapping_booking_is_409(self, client, auth_headers):
        headers = auth_headers(DOCTOR_USER)
        client.post(API, json=create_body(), headers=headers)

        overlapping = (START + timedelta(minutes=15)).isoformat()
        response = client.post(API, json=create_body(startTime=overlapping), headers=headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "APPOINTMENT_CONFLICT"

    def test_back_to_back_booking_is_allowed(self, client, auth_headers):
        headers = auth_headers(DOCTOR_USER)
        client.post(API, json=create_body(), headers=headers)

        adjacent = (START + timedelta(minutes=30)).isoformat()
        response = client.post(API, json=create_body(startTime=adjacent), headers=headers)

        assert response.status_code == status.HTTP_201_CREATED

    def test_missing_fields_are_400(self, client, auth_headers):
        response = client.post(API, json={"title": "Follow-up"}, headers=auth_headers(DOCTOR_USER))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_malformed_start_time_is_422(self, client, auth_headers):
        response = client.post(API, json=create_body(startTime="tomorrow"), headers=auth_headers(DOCTOR_USER))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unknown_doctor_is_404(self, client, auth_headers):
        response = client.post(API, json=create_body(doctorId="doctor-404"), headers=auth_headers(DOCTOR_USER))

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ============================================================================
# Read, update, cancel, respond
# ============================================================================


class TestExistingAppointment:
    @pytest.fixture
    def appointment_id(self, client, auth_headers):
        response = client.post(API, json=create_body(), headers=auth_headers(DOCTOR_USER))
        return response.json()["id"]

    def test_participant_can_read(self, client, auth_headers, appointment_id):
        response = client.get(f"{API}/{appointment_id}", headers=auth_headers(PATIENT_USER))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == appointment_id

    def test_stranger_cannot_read(self, client, auth_headers, appointment_id):
        response = client.get(f"{API}/{appointment_id}", headers=auth_headers("user-stranger"))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_creator_reschedules(self, client, auth_headers, appointment_id):
        new_start = START + timedelta(hours=2)

        response = client.put(
            f"{API}/{appointment_id}",
            json={"startTime": new_start.isoformat(), "duration": 45},
            headers=auth_headers(DOCTOR_USER),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["duration"] == 45
        assert data["end_time"].startswith((new_start + timedelta(minutes=45)).strftime("%Y-%m-%dT%H:%M"))

    def test_non_creator_cannot_update(self, client, auth_headers, appointment_id):
        response = client.put(f"{API}/{appointment_id}", json={"title": "Mine"}, headers=auth_headers(PATIENT_USER))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cancel_then_cancel_again(self, client, auth_headers, appointment_id):
        headers = auth_headers(DOCTOR_USER)

        first = client.post(f"{API}/{appointment_id}/cancel", json={"reason": "Doctor unavailable"}, headers=headers)
        second = client.post(f"{API}/{appointment_id}/cancel", headers=headers)

        assert first.status_code == status.HTTP_200_OK
        assert first.json()["status"] == "cancelled"
        assert first.json()["cancellation_reason"] == "Doctor unavailable"
        assert second.status_code == status.HTTP_409_CONFLICT

    def test_patient_accepts_invitation(self, client, auth_headers, appointment_id):
        response = client.post(f"{API}/{appointment_id}/accept", headers=auth_headers(PATIENT_USER))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Invitation accepted", "data": {"appointmentId": appointment_id}}

        patient = client.get(f"{API}/{appointment_id}", headers=auth_headers(PATIENT_USER)).json()["participants"][1]
        assert patient["status"] == "accepted"

    def test_my_appointments_lists_invitations(self, client, auth_headers, appointment_id):
        response = client.get(f"{API}/my-appointments", headers=auth_headers(PATIENT_USER))

        assert [a["id"] for a in response.json()] == [appointment_id]

    def test_unknown_appointment_is_404(self, client, auth_headers):
        response = client.get(f"{API}/missing", headers=auth_headers(DOCTOR_USER))

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ============================================================================
# Slots
# ============================================================================


def test_available_slots_exclude_booked_window(client, auth_headers):
    headers = auth_headers(DOCTOR_USER)
    client.post(API, json=create_body(), headers=headers)

    response = client.get(
        f"{API}/doctor/doctor-1/available-slots",
        params={"date": START.date().isoformat(), "duration": 30},
        headers=headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["duration"] == 30
    starts = [slot["start_time"][:16] for slot in data["slots"]]
    assert START.strftime("%Y-%m-%dT%H:%M") not in starts
    assert (START + timedelta(minutes=30)).strftime("%Y-%m-%dT%H:%M") in starts


def test_list_route_passes_filters_to_use_case(fastapi_app, api_client, auth_headers):
    use_case = MagicMock()
    use_case.execute = AsyncMock(return_value=[AppointmentBuilder().build()])
    fastapi_app.dependency_overrides[get_list_user_appointments_use_case] = lambda: use_case

    response = api_client.get(
        f"{API}/my-appointments",
        params={"status": "scheduled", "type": "in-person"},
        headers=auth_headers(PATIENT_USER),
    )

    assert response.status_code == status.HTTP_200_OK
    request = use_case.execute.await_args.args[0]
    assert request.user_id == PATIENT_USER
    assert request.status == "scheduled"
    assert request.appointment_type == "in-person"
