"""
Habit Tracker Backend — User Profile Route Handlers
=====================================================

What:  POST /api/users/create-profile
Who:   The signup flow (frontend right after sign-up, or a server-side trigger).

The insert runs with the service-role key. When INTERNAL_API_KEY is set the
caller must present it in X-Internal-Key; otherwise the route is open, as the
browser signup flow requires.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from habitapi.dependencies import get_backend, require_internal_key
from habitapi.schemas.auth import CreateProfileRequest
from habitapi.schemas.common import ApiResponse, success_response
from habitapi.services.profile_service import profile_service
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "/create-profile",
    dependencies=[Depends(require_internal_key)],
    responses={
        200: {"description": "Profile exists (created now or earlier)", "model": ApiResponse},
        400: {"description": "userId or email missing", "model": ApiResponse},
        500: {"description": "Insert failed", "model": ApiResponse},
    },
    summary="Create the profile row for a new user (idempotent)",
)
async def create_profile(
    body: CreateProfileRequest,
    backend: SupabaseBackend = Depends(get_backend),
) -> JSONResponse:
    created = await profile_service.ensure_profile(backend, body.user_id, body.email)
    message = "User profile created" if created else "User profile already exists"
    return success_response(message)
