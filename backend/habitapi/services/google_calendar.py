"""
Habit Tracker Backend — Google Calendar Client
================================================

What:  Insert, list and delete events on the user's primary Google Calendar.
Why:   Habit reminders live in the user's own calendar so their phone and
       email notifications come from Google, not from this service.
How:   Calendar API v3 REST calls over the httpx client the OAuth client owns,
       authorized with the user's Google access token (never ours).

    POST   /calendars/primary/events              create reminder
    GET    /calendars/primary/events?q=habit...   list reminders in a range
    DELETE /calendars/primary/events/{eventId}    undo a reminder

No retries: a failed insert is reported and the caller decides.
"""

import logging
from typing import Any, Dict, List

import httpx

from habitapi.exceptions import UpstreamError

logger = logging.getLogger(__name__)

PRIMARY_EVENTS = "/calendars/primary/events"

# Free-text filter that matches the summary every reminder is created with
HABIT_QUERY = "habit"


class GoogleCalendarClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "https://www.googleapis.com/calendar/v3",
    ):
        self._http = http_client
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def _headers(access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    def _check(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        logger.warning(
            "Google Calendar %s failed: %d %s",
            action,
            response.status_code,
            response.text[:200],
        )
        raise UpstreamError(
            message=f"Google Calendar rejected the {action} request",
            error="Calendar request failed",
            status_code=502,
            context={"status": response.status_code, "action": action},
        )

    async def create_event(self, access_token: str, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert an event (recurring when `event` has a `recurrence` list).

        Returns:
            Google's Event resource (id, htmlLink, ...).

        Raises:
            UpstreamError: Google answered with a non-2xx status
            httpx.HTTPError: Google was unreachable
        """
        response = await self._http.post(
            f"{self.base_url}{PRIMARY_EVENTS}",
            json=event,
            headers=self._headers(access_token),
        )
        self._check(response, "insert")
        return response.json()

    async def list_habit_events(
        self,
        access_token: str,
        time_min: str,
        time_max: str,
    ) -> List[Dict[str, Any]]:
        """Habit reminder occurrences between time_min and time_max (RFC 3339), by start time."""
        response = await self._http.get(
            f"{self.base_url}{PRIMARY_EVENTS}",
            params={
                "timeMin": time_min,
                "timeMax": time_max,
                "q": HABIT_QUERY,
                "singleEvents": "true",
                "orderBy": "startTime",
            },
            headers=self._headers(access_token),
        )
        self._check(response, "list")
        return response.json().get("items", [])

    async def delete_event(self, access_token: str, event_id: str) -> None:
        response = await self._http.delete(
            f"{self.base_url}{PRIMARY_EVENTS}/{event_id}",
            headers=self._headers(access_token),
        )
        self._check(response, "delete")
