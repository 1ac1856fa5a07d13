"""
Habit Tracker Backend — Auth Route Handlers
=============================================

What:  POST /api/auth/logout, POST /api/auth/refresh, POST /api/auth/login.
How:   Extract input, delegate to AuthService, wrap the result in the envelope.
       Failures are raised as HabitApiError subclasses and rendered by the
       global handlers in main.py.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from habitapi.dependencies import get_backend, get_current_user
from habitapi.schemas.auth import AuthenticatedUser, LoginRequest, RefreshRequest
from habitapi.schemas.common import ApiResponse, success_response
from habitapi.services.auth_service import auth_service
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/logout",
    responses={
        200: {"description": "Session ended", "model": ApiResponse},
        401: {"description": "Missing or invalid bearer token", "model": ApiResponse},
        500: {"description": "Backend sign-out failed", "model": ApiResponse},
    },
    summary="End the current session",
)
async def logout(
    user: AuthenticatedUser = Depends(get_current_user),
    backend: SupabaseBackend = Depends(get_backend),
) -> JSONResponse:
    await auth_service.logout(backend, user)
    return success_response("Logged out successfully")


@router.post(
    "/refresh",
    responses={
        200: {"description": "New session tokens", "model": ApiResponse},
        400: {"description": "refreshToken missing", "model": ApiResponse},
        401: {"description": "Refresh token rejected", "model": ApiResponse},
    },
    summary="Exchange a refresh token for a new session",
)
async def refresh(
    body: RefreshRequest,
    backend: SupabaseBackend = Depends(get_backend),
) -> JSONResponse:
    """
    `data.expiresAt` is an ISO-8601 UTC timestamp (or null when the backend
    reports no expiry).
    """
    session = await auth_service.refresh(backend, body.refresh_token)
    return success_response("Token refreshed successfully", data=session)


@router.post(
    "/login",
    responses={
        200: {"description": "Signed in", "model": ApiResponse},
        400: {"description": "Email or password missing/invalid", "model": ApiResponse},
        401: {"description": "Credentials rejected", "model": ApiResponse},
    },
    summary="Sign in with email and password",
)
async def login(
    body: LoginRequest,
    backend: SupabaseBackend = Depends(get_backend),
) -> JSONResponse:
    session = await auth_service.login(backend, body.email, body.password)
    return success_response("Login successful", data=session)
