"""
Habit Tracker Backend — Calendar Reminder Route Handlers
==========================================================

What:  POST /api/calendar/reminders (create), GET /api/calendar/reminders (list).
Who:   The habit settings screen, after the user connected Google Calendar.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from habitapi.dependencies import get_backend, get_current_user, get_google_calendar
from habitapi.schemas.auth import AuthenticatedUser
from habitapi.schemas.calendar import ReminderRequest
from habitapi.schemas.common import ApiResponse, success_response
from habitapi.services.google_calendar import GoogleCalendarClient
from habitapi.services.reminder_service import reminder_service
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendar", tags=["Calendar Reminders"])


@router.post(
    "/reminders",
    responses={
        200: {"description": "eventId and eventUrl in `data`", "model": ApiResponse},
        400: {"description": "Habit fields or Google token missing", "model": ApiResponse},
        401: {"description": "Missing or invalid bearer token", "model": ApiResponse},
        500: {"description": "Google or database failure", "model": ApiResponse},
    },
    summary="Create a recurring Google Calendar reminder for a habit",
)
async def create_reminder(
    body: ReminderRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    backend: SupabaseBackend = Depends(get_backend),
    calendar: Optional[GoogleCalendarClient] = Depends(get_google_calendar),
) -> JSONResponse:
    created = await reminder_service.create_reminder(backend, calendar, user, body)
    return success_response("Calendar reminder created", data=created)


@router.get(
    "/reminders",
    responses={
        200: {"description": "Reminder occurrences in `data.events`", "model": ApiResponse},
        400: {"description": "startDate, endDate or Google token missing", "model": ApiResponse},
        401: {"description": "Missing or invalid bearer token", "model": ApiResponse},
        500: {"description": "Google failure", "model": ApiResponse},
    },
    summary="List habit reminder events in a date range",
)
async def list_reminders(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    access_token: Optional[str] = Query(default=None, alias="accessToken"),
    user: AuthenticatedUser = Depends(get_current_user),
    backend: SupabaseBackend = Depends(get_backend),
    calendar: Optional[GoogleCalendarClient] = Depends(get_google_calendar),
) -> JSONResponse:
    """
    `startDate` and `endDate` are RFC 3339 timestamps passed through to Google.
    `accessToken` is the Google token; omit it to use the stored one.
    """
    events = await reminder_service.list_reminders(
        backend, calendar, user, start_date, end_date, access_token
    )
    return success_response("Calendar reminders retrieved", data={"events": events})
