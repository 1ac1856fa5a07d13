"""
Habit Tracker Backend — Calendar Connection Service
=====================================================

What:  Completes the Google Calendar OAuth flow for the signed-in user.
Why:   The callback is hit by a browser mid-navigation, so every outcome must
       be a redirect the frontend can render, never a JSON error.
How:   A strictly linear sequence; the first failing step decides the redirect.

Flow:
    error param?      ──yes──▶ /calendar?error=access_denied
    code missing?     ──yes──▶ /calendar?error=no_code
    session cookie ok? ──no──▶ /login?error=not_authenticated
    exchange code with Google
    upsert tokens on user_id ──fail──▶ /calendar?error=storage_failed
                             ──ok────▶ /calendar?connected=true
    anything raised along the way    ▶ /calendar?error=auth_failed

There is no compensation step: a failed upsert leaves any previous token row
untouched, and a used authorization code is simply discarded.
"""

import logging
from typing import Optional

from habitapi.config import settings
from habitapi.exceptions import BackendError
from habitapi.schemas.records import OAuthTokenRecord
from habitapi.services.google_oauth import GoogleOAuthClient
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

CONNECTED = "/calendar?connected=true"
ACCESS_DENIED = "/calendar?error=access_denied"
NO_CODE = "/calendar?error=no_code"
NOT_AUTHENTICATED = "/login?error=not_authenticated"
STORAGE_FAILED = "/calendar?error=storage_failed"
AUTH_FAILED = "/calendar?error=auth_failed"


class CalendarConnectService:

    async def complete_authorization(
        self,
        backend: Optional[SupabaseBackend],
        google: Optional[GoogleOAuthClient],
        session_token: Optional[str],
        code: Optional[str],
        error: Optional[str],
    ) -> str:
        """
        Run the callback flow and return the site-relative redirect target.

        Never raises: unexpected failures map to AUTH_FAILED and are logged.
        """
        try:
            return await self._complete(backend, google, session_token, code, error)
        except Exception:
            logger.exception("Google OAuth callback error")
            return AUTH_FAILED

    async def _complete(
        self,
        backend: Optional[SupabaseBackend],
        google: Optional[GoogleOAuthClient],
        session_token: Optional[str],
        code: Optional[str],
        error: Optional[str],
    ) -> str:
        if error:
            logger.info("Google consent refused: %s", error)
            return ACCESS_DENIED

        if not code:
            return NO_CODE

        if backend is None or google is None:
            raise RuntimeError("Calendar connection requires Supabase and Google clients")

        user = await backend.get_user(session_token) if session_token else None
        if user is None:
            return NOT_AUTHENTICATED

        tokens = await google.exchange_code(code)
        record = OAuthTokenRecord.from_token_response(str(user.id), tokens)

        try:
            await backend.upsert_owned(
                access_token=session_token,
                table=settings.oauth_tokens_table,
                record=record.model_dump(),
                on_conflict="user_id",
            )
        except BackendError as e:
            logger.error("Database error storing tokens for %s: %s", user.id, e.message)
            return STORAGE_FAILED

        logger.info("Google Calendar connected for user %s", user.id)
        return CONNECTED


calendar_service = CalendarConnectService()
