"""
Habit Tracker Backend — Google OAuth Client
=============================================

What:  Builds Google's consent URL and exchanges authorization codes for tokens.
Why:   Calendar sync needs an access/refresh token pair per user.
How:   Plain OAuth 2.0 authorization-code flow over httpx:

    Browser ──GET /api/auth/google──▶ 302 accounts.google.com/o/oauth2/v2/auth?...
    Browser ◀── user consents ──▶ 302 /api/auth/google/callback?code=...
    Server  ──POST oauth2.googleapis.com/token (code, client_id, secret)──▶ tokens

Who:   Built once in the lifespan (owns one httpx.AsyncClient); used by
       CalendarConnectService.
When:  Only during the calendar connection flow.

No retries: an authorization code is single-use, so a failed exchange is
reported to the user, who restarts the flow.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from habitapi.exceptions import UpstreamError
from habitapi.schemas.records import GoogleTokenResponse

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: str,
        auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth",
        token_url: str = "https://oauth2.googleapis.com/token",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes
        self.auth_url = auth_url
        self.token_url = token_url
        self._http = http_client or httpx.AsyncClient()

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Shared with GoogleCalendarClient; closed by aclose()."""
        return self._http

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: Optional[str] = None) -> str:
        """
        Consent-screen URL.

        access_type=offline + prompt=consent makes Google return a refresh token
        even when the user connected before.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scopes,
            "access_type": "offline",
            "prompt": "consent",
            "include_granted_scopes": "true",
        }
        if state:
            params["state"] = state
        return f"{self.auth_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> GoogleTokenResponse:
        """
        Trade a single-use authorization code for tokens.

        Raises:
            UpstreamError: Google rejected the code or returned a malformed body
            httpx.HTTPError: the token endpoint was unreachable
        """
        response = await self._http.post(
            self.token_url,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
            headers={"Accept": "application/json"},
        )
        if response.status_code != 200:
            # Google's body is {"error": "invalid_grant", "error_description": "..."}
            logger.warning(
                "Google token exchange failed: %d %s",
                response.status_code,
                response.text[:200],
            )
            raise UpstreamError(
                message="Failed to exchange authorization code",
                error="Token exchange failed",
                status_code=502,
                context={"status": response.status_code},
            )
        return GoogleTokenResponse.model_validate(response.json())

    async def aclose(self) -> None:
        await self._http.aclose()
