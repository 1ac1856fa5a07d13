"""
Habit Tracker Backend — Habit Reminder Service
================================================

What:  Creates recurring habit reminders in the user's Google Calendar and
       lists the reminder events in a date range.
How:   The Google event is created first, then linked to the habit in
       `habit_calendar_events`. If that insert fails the event is deleted
       again so the calendar holds no reminder the app doesn't know about.

Google access token:
    Taken from the request when the client sends one, otherwise from the
    row the calendar connection flow stored in `user_google_tokens`.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from habitapi.config import settings
from habitapi.exceptions import (
    BackendError,
    BackendUnavailableError,
    BadRequestError,
    UpstreamError,
)
from habitapi.schemas.auth import AuthenticatedUser
from habitapi.schemas.calendar import (
    HabitCalendarEvent,
    ReminderCreated,
    ReminderRequest,
    build_reminder_event,
)
from habitapi.services.google_calendar import GoogleCalendarClient
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

CALENDAR_FAILURES = (UpstreamError, httpx.HTTPError)


class ReminderService:

    async def _google_token(
        self,
        backend: SupabaseBackend,
        user: AuthenticatedUser,
        supplied: Optional[str],
    ) -> str:
        if supplied:
            return supplied
        rows = await backend.select_owned(
            access_token=user.access_token,
            table=settings.oauth_tokens_table,
            user_id=user.id,
            columns="access_token",
        )
        token = rows[0].get("access_token") if rows else None
        if not token:
            raise BadRequestError(
                message="Google Calendar access token required",
                field="googleAccessToken",
            )
        return token

    @staticmethod
    def _require_calendar(calendar: Optional[GoogleCalendarClient]) -> GoogleCalendarClient:
        if calendar is None:
            raise BackendUnavailableError(message="Google Calendar client is not configured")
        return calendar

    async def create_reminder(
        self,
        backend: SupabaseBackend,
        calendar: Optional[GoogleCalendarClient],
        user: AuthenticatedUser,
        request: ReminderRequest,
    ) -> ReminderCreated:
        """
        Create a recurring reminder event for one habit.

        Raises:
            BadRequestError: habitId, habitTitle or reminderTime missing, or no
                Google access token available
            UpstreamError (500): Google refused the event, or the link row
                could not be stored (the event is deleted again)
        """
        if not request.habit_id or not request.habit_title or request.reminder_time is None:
            raise BadRequestError(message="Missing habitId, habitTitle or reminderTime")
        calendar = self._require_calendar(calendar)
        google_token = await self._google_token(backend, user, request.google_access_token)

        event = build_reminder_event(
            title=request.habit_title,
            description=request.habit_description,
            reminder_time=request.reminder_time,
            frequency=request.frequency,
            time_zone=settings.reminder_time_zone,
        )
        try:
            created = await calendar.create_event(google_token, event)
        except CALENDAR_FAILURES as e:
            logger.error("Calendar creation error for user %s: %s", user.id, e)
            raise UpstreamError(
                message="Failed to create calendar reminder",
                error="Calendar error",
                status_code=500,
                context={"habit_id": request.habit_id},
            )

        record = HabitCalendarEvent.from_event(user.id, request.habit_id, created)
        try:
            await backend.insert_owned(
                access_token=user.access_token,
                table=settings.calendar_events_table,
                record=record.model_dump(),
            )
        except BackendError as e:
            logger.error("Database error storing reminder %s: %s", record.google_event_id, e.message)
            await self._discard_event(calendar, google_token, record.google_event_id)
            raise UpstreamError(
                message="Failed to save calendar reminder",
                error="Database error",
                status_code=500,
                context={"habit_id": request.habit_id, "code": e.code},
            )

        logger.info("User %s created reminder %s", user.id, record.google_event_id)
        return ReminderCreated(event_id=created["id"], event_url=created.get("htmlLink"))

    async def _discard_event(
        self,
        calendar: GoogleCalendarClient,
        google_token: str,
        event_id: str,
    ) -> None:
        # The database error is what the caller sees; a failed cleanup is only logged
        try:
            await calendar.delete_event(google_token, event_id)
        except CALENDAR_FAILURES:
            logger.exception("Failed to clean up calendar event %s", event_id)

    async def list_reminders(
        self,
        backend: SupabaseBackend,
        calendar: Optional[GoogleCalendarClient],
        user: AuthenticatedUser,
        start_date: Optional[str],
        end_date: Optional[str],
        google_access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if not start_date or not end_date:
            raise BadRequestError(message="Missing required parameters")
        calendar = self._require_calendar(calendar)
        google_token = await self._google_token(backend, user, google_access_token)

        try:
            return await calendar.list_habit_events(google_token, start_date, end_date)
        except CALENDAR_FAILURES as e:
            logger.error("Calendar fetch error for user %s: %s", user.id, e)
            raise UpstreamError(
                message="Failed to fetch calendar events",
                error="Calendar error",
                status_code=500,
            )


reminder_service = ReminderService()
