"""
Habit Tracker Backend — Supabase Backend Client
=================================================

What:  The single gateway to the managed auth + database backend.
Why:   Keeps every Supabase SDK call (and its error types) in one module;
       services above it only ever see BackendError.
How:   Three handles, each with a different trust level:

    ┌──────────────────┬────────────────────────┬─────────────────────────────┐
    │ Handle           │ Key                    │ Used for                    │
    ├──────────────────┼────────────────────────┼─────────────────────────────┤
    │ _anon (auth)     │ anon key               │ verify token, refresh,      │
    │                  │                        │ password sign-in            │
    │ user_table()     │ anon key + user's JWT  │ CRUD subject to row-level   │
    │                  │                        │ security                    │
    │ _admin           │ service-role key       │ profile insert, sign-out    │
    │                  │                        │ (bypasses row-level security)│
    └──────────────────┴────────────────────────┴─────────────────────────────┘

Who:   Built once in the FastAPI lifespan, stored on app.state, injected by
       habitapi.dependencies.get_backend.

Concurrency:
    user_table() opens a fresh PostgREST client per call carrying the caller's
    token. Nothing user-specific is ever set on the shared handles, so
    concurrent requests cannot see each other's credentials. Session state the
    SDK keeps on _anon after refresh/sign-in is never read back.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from postgrest import AsyncPostgrestClient
from postgrest.constants import DEFAULT_POSTGREST_CLIENT_HEADERS
from postgrest.exceptions import APIError
from supabase import AsyncClient, AsyncClientOptions, AuthApiError, AuthError, acreate_client

from habitapi.exceptions import BackendError

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseBackend:
    """
    Async wrapper around the Supabase SDK.

    Lifecycle:
        backend = SupabaseBackend(url, anon_key, service_role_key)
        await backend.connect()     # startup
        ...
        await backend.close()       # shutdown

    Error translation:
        AuthError (auth calls) and APIError (table calls) become BackendError
        carrying the backend's message and code. get_user() is the exception:
        a rejected token is an expected outcome and returns None.
    """

    def __init__(self, url: str, anon_key: str, service_role_key: str):
        self.url = url.rstrip("/")
        self._anon_key = anon_key
        self._service_role_key = service_role_key
        self._anon: Optional[AsyncClient] = None
        self._admin: Optional[AsyncClient] = None

    @property
    def rest_url(self) -> str:
        return f"{self.url}/rest/v1"

    async def connect(self) -> None:
        # Server-side handles: never persist or auto-refresh a session
        options = AsyncClientOptions(auto_refresh_token=False, persist_session=False)
        self._anon = await acreate_client(self.url, self._anon_key, options=options)
        self._admin = await acreate_client(self.url, self._service_role_key, options=options)
        logger.info("Supabase backend connected: %s", self.url)

    async def close(self) -> None:
        self._anon = None
        self._admin = None
        logger.info("Supabase backend handles released")

    @property
    def anon(self) -> AsyncClient:
        if self._anon is None:
            raise RuntimeError("SupabaseBackend.connect() has not been called")
        return self._anon

    @property
    def admin(self) -> AsyncClient:
        if self._admin is None:
            raise RuntimeError("SupabaseBackend.connect() has not been called")
        return self._admin

    # ══════════════════════════════════════════════════════════════════════
    # Auth
    # ══════════════════════════════════════════════════════════════════════

    async def get_user(self, access_token: str) -> Optional[Any]:
        """
        Resolve an access token to the auth user it was issued for.

        Returns:
            The Supabase User (has .id and .email), or None when the backend
            rejects the token (invalid, expired, revoked).

        Raises:
            BackendError: the auth backend could not answer (network, 5xx)
        """
        try:
            response = await self.anon.auth.get_user(access_token)
        except AuthApiError as e:
            if e.status < 500:
                logger.info("Token rejected by auth backend: %s", e.message)
                return None
            raise BackendError(message=e.message, code=e.code) from e
        except AuthError as e:
            raise BackendError(message=e.message, code=getattr(e, "code", None)) from e
        return response.user if response else None

    async def sign_out(self, access_token: str) -> None:
        """
        End the session the access token belongs to.

        Local scope: the user's sessions on other devices stay signed in.

        Raises:
            BackendError: the auth backend refused the sign-out
        """
        try:
            await self.admin.auth.admin.sign_out(access_token, "local")
        except AuthError as e:
            raise BackendError(message=e.message, code=getattr(e, "code", None)) from e

    async def refresh_session(self, refresh_token: str) -> Optional[Any]:
        """
        Exchange a refresh token for a new session.

        Returns:
            The new Session (access_token, refresh_token, expires_at, user) or None.

        Raises:
            BackendError: the refresh token was rejected
        """
        try:
            response = await self.anon.auth.refresh_session(refresh_token)
        except AuthError as e:
            raise BackendError(message=e.message, code=getattr(e, "code", None)) from e
        return response.session if response else None

    async def sign_in_with_password(self, email: str, password: str) -> Optional[Any]:
        """
        Password sign-in.

        Raises:
            BackendError: credentials rejected
        """
        try:
            response = await self.anon.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise BackendError(message=e.message, code=getattr(e, "code", None)) from e
        return response.session if response else None

    # ══════════════════════════════════════════════════════════════════════
    # Tables
    # ══════════════════════════════════════════════════════════════════════

    @asynccontextmanager
    async def user_table(self, access_token: str, table: str) -> AsyncIterator[Any]:
        """
        Yield a PostgREST query builder for `table` acting as the token's user.

        Row-level security applies; callers must still filter on user_id for
        every mutating query.
        """
        headers = {
            **DEFAULT_POSTGREST_CLIENT_HEADERS,
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token}",
        }
        async with AsyncPostgrestClient(self.rest_url, headers=headers) as client:
            yield client.from_(table)

    async def delete_owned(
        self,
        access_token: str,
        table: str,
        row_id: str,
        user_id: str,
    ) -> List[Dict[str, Any]]:
        """
        DELETE FROM table WHERE id = :row_id AND user_id = :user_id RETURNING *

        Returns:
            The deleted rows; empty when nothing matched (absent or not owned).
        """
        try:
            async with self.user_table(access_token, table) as query:
                response = await (
                    query.delete().eq("id", row_id).eq("user_id", user_id).execute()
                )
        except APIError as e:
            raise BackendError(message=e.message or "Delete failed", code=e.code) from e
        return list(response.data or [])

    async def upsert_owned(
        self,
        access_token: str,
        table: str,
        record: Dict[str, Any],
        on_conflict: str = "user_id",
    ) -> List[Dict[str, Any]]:
        """
        INSERT ... ON CONFLICT (on_conflict) DO UPDATE, as the token's user.

        The record must carry the caller's user_id; row-level security rejects
        writes to any other owner.
        """
        try:
            async with self.user_table(access_token, table) as query:
                response = await query.upsert(record, on_conflict=on_conflict).execute()
        except APIError as e:
            raise BackendError(message=e.message or "Upsert failed", code=e.code) from e
        return list(response.data or [])

    async def insert_owned(
        self,
        access_token: str,
        table: str,
        record: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        """INSERT as the token's user; the record must carry the caller's user_id."""
        try:
            async with self.user_table(access_token, table) as query:
                response = await query.insert(record).execute()
        except APIError as e:
            raise BackendError(message=e.message or "Insert failed", code=e.code) from e
        return list(response.data or [])

    async def select_owned(
        self,
        access_token: str,
        table: str,
        user_id: str,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """SELECT columns FROM table WHERE user_id = :user_id"""
        try:
            async with self.user_table(access_token, table) as query:
                response = await query.select(columns).eq("user_id", user_id).execute()
        except APIError as e:
            raise BackendError(message=e.message or "Select failed", code=e.code) from e
        return list(response.data or [])

    async def admin_insert(self, table: str, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Privileged insert with the service-role key (bypasses row-level security).

        Raises:
            BackendError: with code=UNIQUE_VIOLATION when the primary key exists
        """
        try:
            response = await self.admin.table(table).insert(record).execute()
        except APIError as e:
            raise BackendError(message=e.message or "Insert failed", code=e.code) from e
        return list(response.data or [])
