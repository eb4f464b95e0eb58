"""
Calendar Integration Exceptions.
"""

from app.core.domain import IntegrationException


class CalendarSyncError(IntegrationException):
    """Calendar provider rejected or failed a request."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__("google_calendar", message, original_error)


class CalendarRetryableError(CalendarSyncError):
    """
    Transient provider failure (5xx, 429 or transport error).

    Caught by tenacity's retry decorator for automatic retry.
    """
