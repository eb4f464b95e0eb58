"""
Shared pytest fixtures for all tests.

This module provides settings, in-memory collaborators, wired use cases and
the FastAPI test client shared by the unit tests.
"""

import os
from collections.abc import Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

# Ensure test environment before any settings are read
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-unit-tests")

from app.config.settings import Settings  # noqa: E402
from app.core.container import reset_container  # noqa: E402
from app.core.shared import KeyedLock, SideEffectRunner  # noqa: E402
from app.domains.meetings.application.services import MeetingRoomManager  # noqa: E402
from app.domains.meetings.domain import MeetingRoomPolicy  # noqa: E402
from app.domains.scheduling.application.services import AppointmentSideEffects  # noqa: E402
from app.services.token_service import TokenService  # noqa: E402
from tests.utils import (  # noqa: E402
    T0,
    InMemoryAppointmentRepository,
    InMemoryDirectory,
    InMemoryMeetingRoomRepository,
    RecordingCalendar,
    RecordingNotifier,
    RecordingPublisher,
    make_doctor,
    make_organization,
    make_patient,
)


class MutableClock:
    """Injectable clock that tests move forward explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        JWT_SECRET_KEY="test-secret-key-for-unit-tests",
        ENVIRONMENT="test",
        DEBUG=False,
        REMINDERS_ENABLED=False,
        EMAIL_ENABLED=False,
        GOOGLE_CALENDAR_ENABLED=False,
        REALTIME_REDIS_ENABLED=False,
    )


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService(test_settings)


@pytest.fixture
def auth_headers(token_service):
    """Build bearer headers for a user id."""

    def _headers(user_id: str, email: str | None = None) -> dict[str, str]:
        token = token_service.create_access_token({"sub": user_id, "role": "doctor", "email": email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ============================================================================
# TIME FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(T0)


# ============================================================================
# COLLABORATOR FIXTURES
# ============================================================================


@pytest.fixture
def doctor():
    return make_doctor()


@pytest.fixture
def patient():
    return make_patient()


@pytest.fixture
def directory(doctor, patient) -> InMemoryDirectory:
    return InMemoryDirectory(doctors=[doctor], patients=[patient], organizations=[make_organization()])


@pytest.fixture
def appointment_repository() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository()


@pytest.fixture
def room_repository() -> InMemoryMeetingRoomRepository:
    return InMemoryMeetingRoomRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def calendar() -> RecordingCalendar:
    return RecordingCalendar()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def runner() -> SideEffectRunner:
    return SideEffectRunner()


@pytest.fixture
def side_effects(notifier, calendar, publisher, runner) -> AppointmentSideEffects:
    return AppointmentSideEffects(
        notifier=notifier,
        calendar=calendar,
        publisher=publisher,
        runner=runner,
        frontend_url="http://app.test",
        calendar_enabled=True,
    )


@pytest.fixture
def meeting_manager(room_repository, publisher, runner, clock) -> MeetingRoomManager:
    return MeetingRoomManager(
        repository=room_repository,
        publisher=publisher,
        runner=runner,
        room_lock=KeyedLock("meeting-room"),
        policy=MeetingRoomPolicy(base_url="http://meet.test"),
        clock=clock,
    )


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================


@pytest.fixture
def fastapi_app(test_settings):
    """Create FastAPI application instance for testing."""
    from app.core.app_factory import create_app

    reset_container()
    app = create_app(test_settings)
    yield app
    app.dependency_overrides.clear()
    reset_container()


@pytest.fixture
def api_client(fastapi_app) -> Generator[TestClient, None, None]:
    """Create FastAPI test client. The lifespan is not entered, so no database is needed."""
    yield TestClient(fastapi_app)
