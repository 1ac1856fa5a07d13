"""
Habit Tracker Backend — Auth Service
======================================

What:  Session operations: logout, token refresh, password login.
Why:   Keeps the mapping from backend failures to HTTP outcomes out of the routes.
How:   Stateless; each call receives the SupabaseBackend to use.

Outcome table:
    ┌──────────┬────────────────────────┬──────────────────────────────────┐
    │ Operation│ Input problem          │ Backend problem                  │
    ├──────────┼────────────────────────┼──────────────────────────────────┤
    │ logout   │ (handled by token dep) │ 500 "Logout failed" + backend msg│
    │ refresh  │ 400 before backend call│ 401 "Token refresh failed"       │
    │ login    │ 400 before backend call│ 401 "Invalid credentials"        │
    └──────────┴────────────────────────┴──────────────────────────────────┘
"""

import logging
from typing import Optional

from habitapi.exceptions import BackendError, BadRequestError, UpstreamError
from habitapi.schemas.auth import AuthenticatedUser, SessionData
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthService:

    async def logout(self, backend: SupabaseBackend, user: AuthenticatedUser) -> None:
        """
        End the caller's session on the backend.

        Raises:
            UpstreamError (500): backend refused the sign-out; message is the backend's
        """
        try:
            await backend.sign_out(user.access_token)
        except BackendError as e:
            logger.error("Sign-out failed for user %s: %s", user.id, e.message)
            raise UpstreamError(
                message=e.message,
                error="Logout failed",
                status_code=500,
                context={"user_id": user.id},
            )
        logger.info("User %s logged out", user.id)

    async def refresh(
        self,
        backend: SupabaseBackend,
        refresh_token: Optional[str],
    ) -> SessionData:
        """
        Exchange a refresh token for a new session.

        Raises:
            BadRequestError: refresh_token missing or empty (no backend call made)
            UpstreamError (401): backend rejected the token or returned no session
        """
        if not refresh_token:
            raise BadRequestError(message="Refresh token is required", field="refreshToken")

        try:
            session = await backend.refresh_session(refresh_token)
        except BackendError as e:
            logger.info("Token refresh rejected: %s", e.message)
            raise UpstreamError(
                message=e.message or "Unable to refresh session",
                error="Token refresh failed",
                status_code=401,
            )

        if session is None:
            raise UpstreamError(
                message="Unable to refresh session",
                error="Token refresh failed",
                status_code=401,
            )

        return SessionData.from_session(session)

    async def login(
        self,
        backend: SupabaseBackend,
        email: Optional[str],
        password: Optional[str],
    ) -> SessionData:
        """
        Password sign-in.

        Raises:
            BadRequestError: email missing/malformed or password too short
            UpstreamError (401): credentials rejected
        """
        if not email or "@" not in email:
            raise BadRequestError(message="Invalid email format", field="email")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError(
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )

        try:
            session = await backend.sign_in_with_password(email, password)
        except BackendError as e:
            # Email omitted from the log line
            logger.info("Password sign-in rejected: %s", e.message)
            raise UpstreamError(
                message="Invalid email or password",
                error="Invalid credentials",
                status_code=401,
            )

        if session is None:
            raise UpstreamError(
                message="Invalid email or password",
                error="Invalid credentials",
                status_code=401,
            )

        return SessionData.from_session(session)


auth_service = AuthService()
