"""
Unit tests for SendAppointmentRemindersUseCase and ReminderScheduler.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from app.domains.scheduling.application.ports.notification_port import TemplateKind
from app.domains.scheduling.application.use_cases import SendAppointmentRemindersUseCase
from app.domains.scheduling.domain.events import AppointmentReminderDue
from app.domains.scheduling.domain.value_objects import AppointmentStatus
from app.domains.scheduling.infrastructure.scheduler import ReminderScheduler
from tests.utils import AppointmentBuilder, InMemoryAppointmentRepository


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def reminders_use_case(appointment_repository, side_effects, clock):
    return SendAppointmentRemindersUseCase(
        appointment_repository=appointment_repository,
        side_effects=side_effects,
        lead_minutes=60,
        clock=clock,
    )


# ============================================================================
# SendAppointmentRemindersUseCase Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_due_appointment_is_reminded_once(
    reminders_use_case,
    appointment_repository,
    notifier,
    publisher,
    runner,
):
    # Arrange
    appointment = await appointment_repository.save(AppointmentBuilder().starting_in(30).build())

    # Act
    first_run = await reminders_use_case.execute()
    second_run = await reminders_use_case.execute()
    await runner.drain()

    # Assert
    assert [a.id for a in first_run] == [appointment.id]
    assert second_run == []
    assert notifier.kinds() == [TemplateKind.REMINDER]
    assert [type(e) for e in publisher.appointment_events] == [AppointmentReminderDue]
    stored = await appointment_repository.get_by_id(appointment.id)
    assert stored.reminders.email is True


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_appointments_outside_lead_or_cancelled_are_skipped(reminders_use_case, appointment_repository, notifier):
    await appointment_repository.save(AppointmentBuilder().with_id("later").starting_in(120).build())
    await appointment_repository.save(AppointmentBuilder().with_id("past").starting_in(-10).build())
    cancelled = AppointmentBuilder().with_id("cancelled").starting_in(20).build()
    cancelled.cancel()
    await appointment_repository.save(cancelled)

    reminded = await reminders_use_case.execute()

    assert reminded == []
    assert notifier.sent == []


class CancelledDuringSweep(InMemoryAppointmentRepository):
    """Another request cancels each candidate right after the sweep has read it."""

    async def find_needing_reminder(self, start_from, start_until):
        candidates = await super().find_needing_reminder(start_from, start_until)
        for candidate in candidates:
            current = await self.get_by_id(candidate.id)
            current.cancel(reason="Doctor unavailable")
            await self.save(current)
        return candidates


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_sweep_does_not_revive_appointment_cancelled_after_read(side_effects, notifier, clock):
    repository = CancelledDuringSweep()
    appointment = await repository.save(AppointmentBuilder().starting_in(30).build())
    use_case = SendAppointmentRemindersUseCase(
        appointment_repository=repository,
        side_effects=side_effects,
        lead_minutes=60,
        clock=clock,
    )

    reminded = await use_case.execute()

    assert reminded == []
    assert notifier.sent == []
    stored = await repository.get_by_id(appointment.id)
    assert stored.status == AppointmentStatus.CANCELLED
    assert stored.reminders.email is False


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_failed_delivery_still_marks_reminder(reminders_use_case, appointment_repository, notifier, clock):
    notifier.fail = True
    appointment = await appointment_repository.save(AppointmentBuilder().starting_in(45).build())

    reminded = await reminders_use_case.execute()
    clock.now += timedelta(minutes=5)
    again = await reminders_use_case.execute()

    assert [a.id for a in reminded] == [appointment.id]
    assert again == []


# ============================================================================
# ReminderScheduler Tests
# ============================================================================


class TestReminderScheduler:
    """Tests for the background reminder loop."""

    @pytest.mark.asyncio
    async def test_run_once_returns_job_result(self) -> None:
        job = AsyncMock(return_value=3)
        scheduler = ReminderScheduler(job=job, interval_seconds=60)

        assert await scheduler.run_once() == 3
        job.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_once_swallows_job_failure(self) -> None:
        job = AsyncMock(side_effect=RuntimeError("database unavailable"))
        scheduler = ReminderScheduler(job=job, interval_seconds=60)

        assert await scheduler.run_once() == 0

    @pytest.mark.asyncio
    async def test_disabled_scheduler_does_not_start(self) -> None:
        scheduler = ReminderScheduler(job=AsyncMock(return_value=0), enabled=False)

        await scheduler.start()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        scheduler = ReminderScheduler(job=AsyncMock(return_value=0), interval_seconds=3600)

        await scheduler.start()
        assert scheduler.is_running is True

        await scheduler.stop()
        assert scheduler.is_running is False
