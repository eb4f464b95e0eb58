"""
Tests for the HTTP translation of domain exceptions.
"""

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from pydantic import BaseModel

from app.api.exception_handlers import register_exception_handlers
from app.core.domain import (
    AppointmentConflictException,
    AuthorizationException,
    DuplicateEntityException,
    EntityNotFoundException,
    IntegrationException,
    InvalidOperationException,
    ValidationException,
)

RAISED = {
    "validation": ValidationException("Duration must be positive", field="duration"),
    "not-found": EntityNotFoundException(entity_type="Appointment", entity_id="a-1"),
    "forbidden": AuthorizationException(operation="update", resource="appointment:a-1", user_id="user-2"),
    "conflict": AppointmentConflictException(doctor_id="doctor-1"),
    "duplicate": DuplicateEntityException(entity_type="MeetingRoom", field="room_id", value="room-1"),
    "invalid-state": InvalidOperationException(operation="cancel", current_state="cancelled"),
    "integration": IntegrationException(service="smtp", message="SMTP server unreachable"),
}


class Payload(BaseModel):
    duration: int


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{kind}")
    async def raise_kind(kind: str):
        raise RAISED[kind]

    @app.get("/crash")
    async def crash():
        raise RuntimeError("database password is hunter2")

    @app.post("/payload")
    async def payload(body: Payload):
        return body

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    ("kind", "expected_status"),
    [
        ("validation", status.HTTP_400_BAD_REQUEST),
        ("not-found", status.HTTP_404_NOT_FOUND),
        ("forbidden", status.HTTP_403_FORBIDDEN),
        ("conflict", status.HTTP_409_CONFLICT),
        ("duplicate", status.HTTP_409_CONFLICT),
        ("invalid-state", status.HTTP_409_CONFLICT),
        ("integration", status.HTTP_502_BAD_GATEWAY),
    ],
)
def test_domain_exception_status(client, kind, expected_status):
    response = client.get(f"/raise/{kind}")

    assert response.status_code == expected_status
    body = response.json()
    assert body["error"] is True
    assert body["status_code"] == expected_status
    assert body["code"] == RAISED[kind].code
    assert body["message"] == RAISED[kind].message


def test_validation_details_are_returned(client):
    body = client.get("/raise/validation").json()

    assert body["details"]["field"] == "duration"


def test_request_schema_errors_are_422(client):
    response = client.post("/payload", json={"duration": "soon"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    body = response.json()
    assert body["code"] == "REQUEST_VALIDATION"
    assert body["details"][0]["field"] == "body.duration"


def test_unhandled_errors_do_not_leak(client):
    response = client.get("/crash")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body["code"] == "INTERNAL_ERROR"
    assert body["message"] == "Internal server error"
    assert "hunter2" not in response.text


def test_unknown_route_keeps_error_shape(client):
    response = client.get("/nowhere")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "HTTP_404"
