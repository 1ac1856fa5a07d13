"""
Habit Tracker Backend — Calendar Reminder Route Tests
=======================================================

What we test:
    ✅ POST creates a recurring event and links it to the habit
    ✅ Recurrence follows the habit frequency (unknown → daily)
    ✅ Stored Google token is used when the client sends none
    ✅ Database failure deletes the just-created event again
    ✅ GET lists reminder events for a date range
    ✅ 400 before any Google call when input is missing
"""

import httpx
import pytest

from habitapi.dependencies import get_google_calendar
from habitapi.exceptions import BackendError, UpstreamError

REMINDERS = "/api/calendar/reminders"

REMINDER_BODY = {
    "habitId": "habit-7",
    "habitTitle": "Read 20 pages",
    "habitDescription": "Evening reading",
    "reminderTime": "2024-01-15T20:00:00Z",
    "frequency": "weekly",
    "googleAccessToken": "ya29.google",
}

CREATED_EVENT = {
    "id": "evt-123",
    "htmlLink": "https://www.google.com/calendar/event?eid=evt-123",
    "summary": "🎯 Habit Reminder: Read 20 pages",
}


class TestCreateReminder:

    @pytest.mark.asyncio
    async def test_creates_recurring_event(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        mock_calendar.create_event.return_value = CREATED_EVENT

        response = await test_client.post(REMINDERS, json=REMINDER_BODY, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Calendar reminder created",
            "data": {"eventId": "evt-123", "eventUrl": CREATED_EVENT["htmlLink"]},
        }

        token, event = mock_calendar.create_event.await_args.args
        assert token == "ya29.google"
        assert event["summary"] == "🎯 Habit Reminder: Read 20 pages"
        assert event["recurrence"] == ["RRULE:FREQ=WEEKLY"]
        assert event["start"]["dateTime"] == "2024-01-15T20:00:00.000Z"
        assert event["end"]["dateTime"] == "2024-01-15T20:30:00.000Z"
        assert event["reminders"]["useDefault"] is False

    @pytest.mark.asyncio
    async def test_links_event_to_habit(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        mock_calendar.create_event.return_value = CREATED_EVENT

        await test_client.post(REMINDERS, json=REMINDER_BODY, headers=auth_headers)

        kwargs = mock_backend.insert_owned.await_args.kwargs
        assert kwargs["access_token"] == "valid-token"
        assert kwargs["table"] == "habit_calendar_events"
        record = kwargs["record"]
        assert record["user_id"] == "user-1"
        assert record["habit_id"] == "habit-7"
        assert record["google_event_id"] == "evt-123"
        assert record["event_data"] == CREATED_EVENT

    @pytest.mark.asyncio
    async def test_unknown_frequency_repeats_daily(
        self, test_client, mock_calendar, auth_headers
    ):
        mock_calendar.create_event.return_value = CREATED_EVENT

        await test_client.post(
            REMINDERS, json={**REMINDER_BODY, "frequency": "fortnightly"}, headers=auth_headers
        )

        event = mock_calendar.create_event.await_args.args[1]
        assert event["recurrence"] == ["RRULE:FREQ=DAILY"]

    @pytest.mark.asyncio
    async def test_uses_stored_google_token(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        mock_backend.select_owned.return_value = [{"access_token": "ya29.stored"}]
        mock_calendar.create_event.return_value = CREATED_EVENT
        body = {k: v for k, v in REMINDER_BODY.items() if k != "googleAccessToken"}

        response = await test_client.post(REMINDERS, json=body, headers=auth_headers)

        assert response.status_code == 200
        assert mock_calendar.create_event.await_args.args[0] == "ya29.stored"
        assert mock_backend.select_owned.await_args.kwargs["user_id"] == "user-1"

    @pytest.mark.asyncio
    async def test_no_google_token_is_400(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        body = {k: v for k, v in REMINDER_BODY.items() if k != "googleAccessToken"}

        response = await test_client.post(REMINDERS, json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Google Calendar access token required"
        mock_calendar.create_event.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["habitId", "habitTitle", "reminderTime"])
    async def test_missing_habit_fields_are_400(
        self, test_client, mock_calendar, auth_headers, missing
    ):
        body = {k: v for k, v in REMINDER_BODY.items() if k != missing}

        response = await test_client.post(REMINDERS, json=body, headers=auth_headers)

        assert response.status_code == 400
        mock_calendar.create_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_failure_deletes_event(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        mock_calendar.create_event.return_value = CREATED_EVENT
        mock_backend.insert_owned.side_effect = BackendError(
            message='relation "habit_calendar_events" does not exist', code="42P01"
        )

        response = await test_client.post(REMINDERS, json=REMINDER_BODY, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "Database error"
        mock_calendar.delete_event.assert_awaited_once_with("ya29.google", "evt-123")

    @pytest.mark.asyncio
    async def test_failed_cleanup_still_reports_database_error(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        mock_calendar.create_event.return_value = CREATED_EVENT
        mock_backend.insert_owned.side_effect = BackendError(message="insert failed")
        mock_calendar.delete_event.side_effect = httpx.ConnectError("connection refused")

        response = await test_client.post(REMINDERS, json=REMINDER_BODY, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "Database error"

    @pytest.mark.asyncio
    async def test_google_rejects_event(
        self, test_client, mock_backend, mock_calendar, auth_headers
    ):
        mock_calendar.create_event.side_effect = UpstreamError(
            message="Google Calendar rejected the insert request", status_code=502
        )

        response = await test_client.post(REMINDERS, json=REMINDER_BODY, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to create calendar reminder"
        mock_backend.insert_owned.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_bearer_token(self, test_client, mock_calendar):
        response = await test_client.post(REMINDERS, json=REMINDER_BODY)

        assert response.status_code == 401
        mock_calendar.create_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_calendar_client_missing(self, app, test_client, auth_headers):
        app.dependency_overrides[get_google_calendar] = lambda: None

        response = await test_client.post(REMINDERS, json=REMINDER_BODY, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["success"] is False


class TestListReminders:

    RANGE = {
        "startDate": "2024-01-01T00:00:00Z",
        "endDate": "2024-01-31T23:59:59Z",
        "accessToken": "ya29.google",
    }

    @pytest.mark.asyncio
    async def test_lists_events(self, test_client, mock_calendar, auth_headers):
        events = [{"id": "evt-123_20240115T200000Z", "summary": CREATED_EVENT["summary"]}]
        mock_calendar.list_habit_events.return_value = events

        response = await test_client.get(REMINDERS, params=self.RANGE, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {"events": events}
        mock_calendar.list_habit_events.assert_awaited_once_with(
            "ya29.google", "2024-01-01T00:00:00Z", "2024-01-31T23:59:59Z"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["startDate", "endDate"])
    async def test_missing_range_is_400(self, test_client, mock_calendar, auth_headers, missing):
        params = {k: v for k, v in self.RANGE.items() if k != missing}

        response = await test_client.get(REMINDERS, params=params, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required parameters"
        mock_calendar.list_habit_events.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_google_failure_is_500(self, test_client, mock_calendar, auth_headers):
        mock_calendar.list_habit_events.side_effect = httpx.ReadTimeout("timed out")

        response = await test_client.get(REMINDERS, params=self.RANGE, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch calendar events"
