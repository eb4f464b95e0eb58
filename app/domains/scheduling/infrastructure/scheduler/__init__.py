"""Scheduling background jobs."""

from .reminder_scheduler import ReminderJob, ReminderScheduler

__all__ = ["ReminderJob", "ReminderScheduler"]
