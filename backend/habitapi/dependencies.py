"""
Habit Tracker Backend — FastAPI Dependencies
==============================================

What:  Dependency wiring: backend handles, the bearer-token verifier and the
       browser session cookie reader.
Why:   Handlers declare what they need (`Depends(get_current_user)`) and tests
       replace the handles with `app.dependency_overrides`.

Handles live on app.state, created by the lifespan in main.py. Nothing here
is a module-level client.
"""

import base64
import hmac
import json
import logging
from typing import List, Mapping, Optional
from urllib.parse import unquote

from fastapi import Depends, Header, Request

from habitapi.config import settings
from habitapi.exceptions import BackendUnavailableError, UnauthorizedError
from habitapi.schemas.auth import AuthenticatedUser
from habitapi.services.google_calendar import GoogleCalendarClient
from habitapi.services.google_oauth import GoogleOAuthClient
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_optional_backend(request: Request) -> Optional[SupabaseBackend]:
    return getattr(request.app.state, "backend", None)


def get_backend(
    backend: Optional[SupabaseBackend] = Depends(get_optional_backend),
) -> SupabaseBackend:
    if backend is None:
        raise BackendUnavailableError()
    return backend


def get_google_oauth(request: Request) -> Optional[GoogleOAuthClient]:
    return getattr(request.app.state, "google_oauth", None)


def get_google_calendar(request: Request) -> Optional[GoogleCalendarClient]:
    return getattr(request.app.state, "google_calendar", None)


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    """
    Extract the token from `Authorization: Bearer <token>`.

    The prefix match is literal and case-sensitive.

    Raises:
        UnauthorizedError: header absent or not a Bearer credential
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError()
    return authorization[len(BEARER_PREFIX):]


async def get_current_user(
    token: str = Depends(get_bearer_token),
    backend: SupabaseBackend = Depends(get_backend),
) -> AuthenticatedUser:
    """
    Resolve the bearer token to a user through the auth backend.

    Raises:
        UnauthorizedError("Invalid token"): empty, invalid, expired or revoked token
    """
    user = await backend.get_user(token) if token.strip() else None
    if user is None:
        raise UnauthorizedError(
            message="The provided token is invalid or has expired",
            error="Invalid token",
        )
    return AuthenticatedUser(id=str(user.id), email=user.email, access_token=token)


def require_internal_key(x_internal_key: Optional[str] = Header(default=None)) -> None:
    """
    Guard for server-to-server endpoints.

    Only enforced when INTERNAL_API_KEY is configured.
    """
    expected = settings.internal_api_key
    if not expected:
        return
    if not x_internal_key or not hmac.compare_digest(x_internal_key, expected):
        logger.warning("Rejected internal call with missing or wrong X-Internal-Key")
        raise UnauthorizedError(message="Internal endpoint requires a valid X-Internal-Key")


# ══════════════════════════════════════════════════════════════════════════
# Browser session cookie
# ══════════════════════════════════════════════════════════════════════════

BASE64_PREFIX = "base64-"


def read_chunked_cookie(cookies: Mapping[str, str], name: str) -> Optional[str]:
    """
    Return cookie `name`, joining `name.0`, `name.1`, ... when the browser
    client split a large session across several cookies.
    """
    if name in cookies:
        return cookies[name]
    chunks: List[str] = []
    while f"{name}.{len(chunks)}" in cookies:
        chunks.append(cookies[f"{name}.{len(chunks)}"])
    return "".join(chunks) or None


def access_token_from_cookie(value: str) -> Optional[str]:
    """
    Pull the access token out of a Supabase session cookie value.

    Accepted shapes:
        ["<access>", "<refresh>", ...]             auth-helpers array
        {"access_token": "<access>", ...}          serialized Session
        base64-<base64url of either of the above>  @supabase/ssr
        <access>                                   bare token
    Values may be URL-encoded.
    """
    value = unquote(value)
    if value.startswith(BASE64_PREFIX):
        encoded = value[len(BASE64_PREFIX):]
        try:
            value = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode("utf-8")
        except ValueError:
            return None

    try:
        session = json.loads(value)
    except ValueError:
        return value or None

    token = None
    if isinstance(session, list) and session:
        token = session[0]
    elif isinstance(session, dict):
        token = session.get("access_token")
        if token is None and isinstance(session.get("currentSession"), dict):
            token = session["currentSession"].get("access_token")
    return token if isinstance(token, str) and token else None


def get_session_token(request: Request) -> Optional[str]:
    """Access token of the browser session, or None when there is no usable cookie."""
    raw = read_chunked_cookie(request.cookies, settings.session_cookie_name_resolved)
    if raw is None:
        return None
    return access_token_from_cookie(raw)
