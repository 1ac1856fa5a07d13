"""
Habit Tracker Backend — Google Calendar OAuth Routes
======================================================

What:  GET /api/auth/google (start) and GET /api/auth/google/callback (finish).
Who:   Browsers following links/redirects, never API clients.

Both routes only ever answer with a 302. The callback never reports an error
status: failures become `?error=<reason>` on the frontend's calendar page.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from habitapi.config import settings
from habitapi.dependencies import get_google_oauth, get_optional_backend, get_session_token
from habitapi.services.calendar_service import AUTH_FAILED, calendar_service
from habitapi.services.google_oauth import GoogleOAuthClient
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth/google", tags=["Calendar OAuth"])


def _site_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=f"{settings.site_url}{path}", status_code=302)


@router.get("", summary="Redirect to Google's consent screen")
async def start_google_authorization(
    google: Optional[GoogleOAuthClient] = Depends(get_google_oauth),
) -> RedirectResponse:
    if google is None or not google.configured:
        logger.error("Google OAuth requested but GOOGLE_CLIENT_ID/SECRET are not set")
        return _site_redirect(AUTH_FAILED)
    return RedirectResponse(url=google.authorization_url(), status_code=302)


@router.get("/callback", summary="Complete Google Calendar authorization")
async def google_callback(
    code: Optional[str] = Query(default=None),
    error: Optional[str] = Query(default=None),
    backend: Optional[SupabaseBackend] = Depends(get_optional_backend),
    google: Optional[GoogleOAuthClient] = Depends(get_google_oauth),
    session_token: Optional[str] = Depends(get_session_token),
) -> RedirectResponse:
    """
    Google redirects here with `?code=...` on consent or `?error=...` on refusal.
    The signed-in user is identified by the session cookie.
    """
    target = await calendar_service.complete_authorization(
        backend=backend,
        google=google,
        session_token=session_token,
        code=code,
        error=error,
    )
    return _site_redirect(target)
