"""
Habit Tracker Backend — Calendar Reminder Schemas
===================================================

What:  Request/response models for /api/calendar/reminders, the row stored in
       `habit_calendar_events`, and the builder for the Google Event body.

Event shape sent to Google (Calendar API v3 Event resource):
    {
        "summary":     "🎯 Habit Reminder: <title>",
        "description": "Time to work on your habit: ...",
        "start":       {"dateTime": "<RFC 3339>", "timeZone": "<IANA>"},
        "end":         {"dateTime": start + 30 min, "timeZone": "<IANA>"},
        "recurrence":  ["RRULE:FREQ=DAILY" | WEEKLY | MONTHLY],
        "reminders":   {"useDefault": false, "overrides": [popup 10, email 60]}
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

_CAMEL = {"populate_by_name": True}

REMINDER_DURATION = timedelta(minutes=30)

RECURRENCE_RULES = {
    "daily": "RRULE:FREQ=DAILY",
    "weekly": "RRULE:FREQ=WEEKLY",
    "monthly": "RRULE:FREQ=MONTHLY",
}


def habit_recurrence(frequency: Optional[str]) -> list:
    """Unknown or missing frequencies repeat daily."""
    rule = RECURRENCE_RULES.get((frequency or "").lower(), RECURRENCE_RULES["daily"])
    return [rule]


def rfc3339_utc(moment: datetime) -> str:
    """UTC timestamp with millisecond precision; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_reminder_event(
    title: str,
    description: Optional[str],
    reminder_time: datetime,
    frequency: Optional[str],
    time_zone: str,
) -> Dict[str, Any]:
    end_time = reminder_time + REMINDER_DURATION
    return {
        "summary": f"🎯 Habit Reminder: {title}",
        "description": (
            f"Time to work on your habit: {description or title}"
            "\n\nCreated by HabitTracker App"
        ),
        "start": {"dateTime": rfc3339_utc(reminder_time), "timeZone": time_zone},
        "end": {"dateTime": rfc3339_utc(end_time), "timeZone": time_zone},
        "recurrence": habit_recurrence(frequency),
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "popup", "minutes": 10},
                {"method": "email", "minutes": 60},
            ],
        },
    }


# ══════════════════════════════════════════════════════════════════════════
# Request / Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReminderRequest(BaseModel):
    """
    Body of POST /api/calendar/reminders.

    googleAccessToken is optional: without it the token stored by the
    calendar connection flow is used.
    """
    habit_id: Optional[str] = Field(default=None, alias="habitId")
    habit_title: Optional[str] = Field(default=None, alias="habitTitle")
    habit_description: Optional[str] = Field(default=None, alias="habitDescription")
    reminder_time: Optional[datetime] = Field(default=None, alias="reminderTime")
    frequency: Optional[str] = Field(default=None, description="daily, weekly or monthly")
    google_access_token: Optional[str] = Field(default=None, alias="googleAccessToken")

    model_config = _CAMEL


class ReminderCreated(BaseModel):
    event_id: str = Field(alias="eventId")
    event_url: Optional[str] = Field(default=None, alias="eventUrl")

    model_config = _CAMEL


class HabitCalendarEvent(BaseModel):
    """Row in `habit_calendar_events`: links a habit to the Google event reminding of it."""
    user_id: str
    habit_id: str
    google_event_id: str
    event_data: Dict[str, Any]
    created_at: str

    @classmethod
    def from_event(
        cls,
        user_id: str,
        habit_id: str,
        event: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> "HabitCalendarEvent":
        now = now or datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            habit_id=habit_id,
            google_event_id=event["id"],
            event_data=event,
            created_at=now.isoformat(),
        )
