"""
External Calendar Integration
"""

from .exceptions import CalendarRetryableError, CalendarSyncError
from .google_calendar_client import GoogleCalendarClient

__all__ = [
    "CalendarRetryableError",
    "CalendarSyncError",
    "GoogleCalendarClient",
]
