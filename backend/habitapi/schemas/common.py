"""
Habit Tracker Backend — Response Envelope
===========================================

What:  The uniform JSON envelope every non-redirect route returns.
Why:   Clients branch on `success` and read `error`/`message` without caring
       which route produced the response.

Shape:
    {
        "success": true | false,
        "error":   "<label>",        # only on failure
        "message": "<human readable>",
        "data":    {...}             # only when the route returns a payload
    }
"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Envelope for every JSON route. `error` and `data` are omitted when None."""

    success: bool = Field(description="Whether the operation succeeded")
    error: Optional[str] = Field(default=None, description="Short error label on failure")
    message: str = Field(description="Human-readable outcome")
    data: Optional[Any] = Field(default=None, description="Route-specific payload")

    def to_content(self) -> Dict[str, Any]:
        # Only top-level keys are dropped; nested nulls (e.g. expiresAt) are kept
        content = self.model_dump(mode="json", by_alias=True)
        for key in ("error", "data"):
            if content[key] is None:
                del content[key]
        return content

    def to_response(
        self,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
    ) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=self.to_content(), headers=headers)


def success_response(
    message: str,
    data: Optional[Any] = None,
    status_code: int = 200,
) -> JSONResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    return ApiResponse(success=True, message=message, data=data).to_response(status_code)


def error_response(
    status_code: int,
    error: str,
    message: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return ApiResponse(success=False, error=error, message=message).to_response(
        status_code, headers=headers
    )


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    backend: str = Field(description="Supabase handle: connected, unconfigured")
    calendar_oauth: str = Field(description="Google OAuth client: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
