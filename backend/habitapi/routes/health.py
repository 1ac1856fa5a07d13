"""
Habit Tracker Backend — Health Check Route
============================================

What:  Health check endpoint for monitoring and load balancer health checks.
How:   Reports whether the lifespan managed to build the Supabase handle and
       whether Google OAuth credentials are present. It does not call out to
       either service; checks run every few seconds.

Status levels:
    - healthy:   both handles configured
    - degraded:  at least one missing (auth routes answer 500, calendar
                 connection redirects with error=auth_failed)
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends

from habitapi import __version__
from habitapi.dependencies import get_google_oauth, get_optional_backend
from habitapi.schemas.common import HealthResponse
from habitapi.services.google_oauth import GoogleOAuthClient
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    backend: Optional[SupabaseBackend] = Depends(get_optional_backend),
    google: Optional[GoogleOAuthClient] = Depends(get_google_oauth),
) -> HealthResponse:
    backend_status = "connected" if backend is not None else "unconfigured"
    oauth_status = "configured" if google is not None and google.configured else "unconfigured"
    overall = "healthy"
    if backend_status != "connected" or oauth_status != "configured":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        backend=backend_status,
        calendar_oauth=oauth_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
