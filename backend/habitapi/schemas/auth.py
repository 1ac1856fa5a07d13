"""
Habit Tracker Backend — Auth Request/Response Schemas
=======================================================

What:  Pydantic models for the auth and profile routes' bodies and payloads.
Why:   The frontend speaks camelCase (`refreshToken`, `userId`); Python code
       uses snake_case. Field aliases bridge the two in one place.

Required fields are declared Optional on purpose: a missing field must become
our 400 envelope (raised by the service), not FastAPI's default 422.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

_CAMEL = {"populate_by_name": True}


def epoch_to_iso(expires_at: Optional[float]) -> Optional[str]:
    """
    Convert epoch seconds to an ISO-8601 UTC timestamp with millisecond precision.

    >>> epoch_to_iso(1700000000)
    '2023-11-14T22:13:20.000Z'
    """
    if expires_at is None:
        return None
    millis = expires_at * 1000
    moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")

    model_config = _CAMEL


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CreateProfileRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    email: Optional[str] = None

    model_config = _CAMEL


# ══════════════════════════════════════════════════════════════════════════
# Response Payloads
# ══════════════════════════════════════════════════════════════════════════


class AuthenticatedUser(BaseModel):
    """
    Identity resolved from a verified bearer token.

    `access_token` is the caller's own token; services forward it to the
    backend so row-level security applies to their queries.
    """
    id: str
    email: Optional[str] = None
    access_token: str = Field(repr=False)


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None


class SessionData(BaseModel):
    """`data` payload of a successful refresh or login."""
    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")
    expires_at: Optional[str] = Field(default=None, alias="expiresAt")
    user: Optional[SessionUser] = None

    model_config = _CAMEL

    @classmethod
    def from_session(cls, session: Any) -> "SessionData":
        """Normalize a Supabase Session (epoch-second expiry) into the API payload."""
        user = getattr(session, "user", None)
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=epoch_to_iso(getattr(session, "expires_at", None)),
            user=SessionUser(id=str(user.id), email=user.email) if user else None,
        )
