"""
Unit tests for the SQLAlchemy appointment repository.

Tests the mapping between the Appointment aggregate and AppointmentModel
against a mocked async session.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException
from app.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus, AppointmentType
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import AppointmentModel
from app.domains.scheduling.infrastructure.repositories import SQLAlchemyAppointmentRepository
from tests.utils import T0, AppointmentBuilder


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_async_session():
    """Create a mock async database session."""
    session = AsyncMock(spec=AsyncSession)
    session.get = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def repository(mock_async_session) -> SQLAlchemyAppointmentRepository:
    return SQLAlchemyAppointmentRepository(mock_async_session)


def scalars_result(*models):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(models)
    return result


# ============================================================================
# Save
# ============================================================================


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_save_inserts_new_virtual_appointment(repository, mock_async_session):
    """A new aggregate is added as a model carrying its room binding."""
    # Arrange
    mock_async_session.get.return_value = None
    appointment = AppointmentBuilder().virtual().build()

    # Act
    saved = await repository.save(appointment)

    # Assert
    model = mock_async_session.add.call_args.args[0]
    assert isinstance(model, AppointmentModel)
    assert model.appointment_type == AppointmentType.VIRTUAL
    assert model.room_id == "room-00000000000000aa"
    assert model.access_code == "ACCESS0001"
    assert model.location is None
    assert model.version == appointment.version
    mock_async_session.commit.assert_awaited_once()

    assert saved.id == appointment.id
    assert saved.details == appointment.details
    assert saved.participants == appointment.participants
    assert saved.end_time == appointment.end_time


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_save_updates_row_read_at_same_version(repository, mock_async_session):
    """A persisted aggregate is written with an UPDATE guarded by its version."""
    # Arrange
    appointment = AppointmentBuilder().build()
    appointment.version = 3
    appointment.cancel(reason="Doctor unavailable", now=T0)
    mock_async_session.execute.return_value = MagicMock(rowcount=1)

    # Act
    saved = await repository.save(appointment)

    # Assert
    mock_async_session.add.assert_not_called()
    statement = mock_async_session.execute.await_args.args[0]
    where = str(statement.whereclause)
    assert "appointments.id = " in where
    assert "appointments.version = " in where
    assert statement.whereclause.compile().params["version_1"] == 3
    mock_async_session.commit.assert_awaited_once()
    assert saved.is_cancelled
    assert saved.cancelled_at == T0
    assert saved.version == 4


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_save_refuses_stale_copy(repository, mock_async_session):
    """A row written by someone else since the read matches nothing and is left alone."""
    # Arrange
    appointment = AppointmentBuilder().build()
    appointment.version = 3
    mock_async_session.execute.return_value = MagicMock(rowcount=0)

    # Act
    with pytest.raises(ConcurrencyException) as exc_info:
        await repository.save(appointment)

    # Assert
    assert exc_info.value.details["expected_version"] == 3
    assert appointment.version == 3
    mock_async_session.rollback.assert_awaited_once()
    mock_async_session.commit.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.repository
def test_in_person_round_trip_keeps_location(repository):
    """In-person details survive the model mapping."""
    appointment = AppointmentBuilder().build()

    restored = repository._to_entity(repository._to_model(appointment))

    assert restored.appointment_type == AppointmentType.IN_PERSON
    assert restored.details.location == "Room 4"
    assert restored.calendar is None
    assert restored.reminders.email is False


# ============================================================================
# Queries
# ============================================================================


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_get_by_id_not_found(repository, mock_async_session):
    mock_async_session.get.return_value = None

    assert await repository.get_by_id("missing") is None


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_find_conflicts_excludes_given_appointment(repository, mock_async_session):
    """The conflict query filters on the window and the excluded id."""
    # Arrange
    booked = AppointmentBuilder().with_id("appointment-1").build()
    mock_async_session.execute.return_value = scalars_result(repository._to_model(booked))

    # Act
    conflicts = await repository.find_conflicts("doctor-1", booked.window, exclude_appointment_id="appointment-2")

    # Assert
    assert [a.id for a in conflicts] == ["appointment-1"]
    statement = str(mock_async_session.execute.await_args.args[0])
    assert "appointments.start_time <" in statement
    assert "appointments.end_time >" in statement
    assert "appointments.id !=" in statement


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_find_needing_reminder_maps_rows(repository, mock_async_session):
    due = AppointmentBuilder().with_id("appointment-1").starting_in(60).build()
    mock_async_session.execute.return_value = scalars_result(repository._to_model(due))

    found = await repository.find_needing_reminder(T0, T0.replace(hour=12))

    assert [a.id for a in found] == ["appointment-1"]