"""
Google Calendar Client.

Mirrors appointments into a doctor's Google Calendar over the REST API.
Credentials arrive with every call; the client holds no per-user state.
"""

import logging
from typing import Any

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.domains.scheduling.application.ports.calendar_port import CalendarEventData, ICalendarSync
from app.domains.scheduling.domain.value_objects.calendar import CalendarAccount, CalendarBinding

from .exceptions import CalendarRetryableError, CalendarSyncError

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class GoogleCalendarClient(ICalendarSync):
    """
    HTTP client for the Google Calendar events API.

    Uses a persistent AsyncClient for connection reuse; call ``close`` on
    shutdown.
    """

    DEFAULT_TIMEOUT = 15.0

    def __init__(self, base_url: str = GOOGLE_CALENDAR_API, timeout: float = DEFAULT_TIMEOUT):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.initialize()
        return self._client  # type: ignore

    # ==================== ICalendarSync ====================

    async def create_event(self, account: CalendarAccount, event: CalendarEventData) -> CalendarBinding:
        data = await self._request("POST", self._events_url(account), account, json=self._event_body(event))
        logger.info(f"Created calendar event {data.get('id')} in calendar {account.calendar_id}")
        return CalendarBinding(external_event_id=data["id"], external_event_link=data.get("htmlLink"))

    async def update_event(
        self,
        account: CalendarAccount,
        event_id: str,
        event: CalendarEventData,
    ) -> CalendarBinding:
        data = await self._request(
            "PUT", f"{self._events_url(account)}/{event_id}", account, json=self._event_body(event)
        )
        return CalendarBinding(external_event_id=data.get("id", event_id), external_event_link=data.get("htmlLink"))

    async def delete_event(self, account: CalendarAccount, event_id: str) -> None:
        await self._request("DELETE", f"{self._events_url(account)}/{event_id}", account)
        logger.info(f"Deleted calendar event {event_id} from calendar {account.calendar_id}")

    # ==================== HTTP ====================

    def _events_url(self, account: CalendarAccount) -> str:
        return f"{self._base_url}/calendars/{account.calendar_id}/events"

    @staticmethod
    def _event_body(event: CalendarEventData) -> dict[str, Any]:
        body: dict[str, Any] = {
            "summary": event.title,
            "description": event.description or "",
            "start": {"dateTime": event.start_time.isoformat(), "timeZone": event.timezone},
            "end": {"dateTime": event.end_time.isoformat(), "timeZone": event.timezone},
            "attendees": [{"email": email} for email in event.attendees],
        }
        if event.location:
            body["location"] = event.location
        return body

    @retry(
        retry=retry_if_exception_type(CalendarRetryableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=0.5, max=10.0, jitter=1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        url: str,
        account: CalendarAccount,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Execute one request, retrying transient failures.

        Raises:
            CalendarRetryableError: 5xx/429/transport error after all attempts
            CalendarSyncError: Any other non-success status
        """
        client = await self._ensure_client()
        try:
            response = await client.request(
                method,
                url,
                headers={"Authorization": f"Bearer {account.access_token}"},
                json=json,
            )
        except httpx.TransportError as e:
            raise CalendarRetryableError(f"{method} {url} failed: {e}", e) from e

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise CalendarRetryableError(f"{method} {url} returned {response.status_code}")
        if response.status_code >= 400:
            raise CalendarSyncError(f"{method} {url} returned {response.status_code}: {response.text[:200]}")

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()
