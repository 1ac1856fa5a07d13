"""
Habit Tracker Backend — Habit Log Route Handlers
==================================================

What:  DELETE /api/habit-logs/{id}
Who:   The dashboard's "undo completion" action.

Ownership is checked inside the delete query (see HabitLogService), so the
404 for "someone else's log" is indistinguishable from "no such log".
"""

import logging

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from habitapi.dependencies import get_backend, get_current_user
from habitapi.schemas.auth import AuthenticatedUser
from habitapi.schemas.common import ApiResponse, success_response
from habitapi.services.habit_log_service import habit_log_service
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/habit-logs", tags=["Habit Logs"])


@router.delete(
    "/{log_id}",
    responses={
        200: {"description": "Deleted row in `data`", "model": ApiResponse},
        401: {"description": "Missing or invalid bearer token", "model": ApiResponse},
        404: {"description": "Not found or not owned by the caller", "model": ApiResponse},
    },
    summary="Delete one of the caller's habit logs",
)
async def delete_habit_log(
    log_id: str = Path(..., description="Habit log id"),
    user: AuthenticatedUser = Depends(get_current_user),
    backend: SupabaseBackend = Depends(get_backend),
) -> JSONResponse:
    deleted = await habit_log_service.delete_log(backend, user, log_id)
    return success_response("Habit log deleted successfully", data=deleted)
