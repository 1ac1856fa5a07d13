"""
Habit Tracker Backend — Backend Record Models
===============================================

What:  Pydantic models for the rows exchanged with Supabase tables.
Why:   The tables are owned by the managed backend, not by this service;
       these models document the columns we read and write and build the
       exact payloads we send.

Tables:
    users               → UserProfile      (mirrored on signup by create-profile)
    habits              → Habit            (owned by the backend; listed for reference)
    habit_logs          → HabitLog         (deleted by its owner)
    user_google_tokens  → OAuthTokenRecord (upserted on user_id by the OAuth callback)
    habit_calendar_events → schemas/calendar.HabitCalendarEvent (inserted per reminder)

Timestamps are kept as the ISO strings PostgREST returns so a row we echo back
to the client is byte-for-byte what the backend stored.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """Profile row in the `users` table. `id` equals the auth user's id."""
    id: str
    email: str
    full_name: str = ""
    avatar_url: str = ""

    @classmethod
    def blank(cls, user_id: str, email: str) -> "UserProfile":
        """The initial profile written right after signup."""
        return cls(id=user_id, email=email, full_name="", avatar_url="")


class Habit(BaseModel):
    id: str
    user_id: str
    title: str
    # Free-form: "daily", "weekly", ...
    frequency: str
    created_at: Optional[str] = None

    model_config = {"extra": "allow"}


class HabitLog(BaseModel):
    """
    Row in the `habit_logs` table.

    Extra columns the backend returns (notes, completed_at, ...) are kept so the
    deleted row can be echoed back unchanged.
    """
    id: str
    user_id: str
    habit_id: Optional[str] = None
    date: Optional[str] = None
    completed: Optional[bool] = None
    created_at: Optional[str] = None

    model_config = {"extra": "allow"}


class GoogleTokenResponse(BaseModel):
    """Body of a successful authorization-code exchange at Google's token endpoint."""
    access_token: str
    expires_in: int = Field(description="Lifetime of access_token in seconds")
    token_type: str = "Bearer"
    scope: str = ""
    # Google only returns a refresh token on the first consent (or prompt=consent)
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None


class OAuthTokenRecord(BaseModel):
    """
    Row in `user_google_tokens`, unique on `user_id`.

    Every column is always present in the upsert payload, so a later exchange
    replaces the stored row entirely rather than merging into it.
    """
    user_id: str
    access_token: str
    refresh_token: Optional[str]
    expires_at: str
    token_type: str
    scope: str
    updated_at: str

    @classmethod
    def from_token_response(
        cls,
        user_id: str,
        tokens: GoogleTokenResponse,
        now: Optional[datetime] = None,
    ) -> "OAuthTokenRecord":
        now = now or datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=(now + timedelta(seconds=tokens.expires_in)).isoformat(),
            token_type=tokens.token_type,
            scope=tokens.scope,
            updated_at=now.isoformat(),
        )
