"""
Habit Tracker Backend — Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for every failure a handler can report.
Why:   Each exception knows its HTTP status and the `error` label of the JSON
       envelope, so routes raise and the global handlers in main.py render.
How:   Each exception carries a message and optional context dict.
       The context is logged server-side and never returned to the client.

Exception Hierarchy:
    HabitApiError (base)
    ├── BadRequestError           → 400 Bad Request (missing/invalid fields)
    ├── UnauthorizedError         → 401 Unauthorized (missing/invalid token)
    ├── NotFoundError             → 404 Not Found (absent OR not owned)
    ├── UpstreamError             → 500 or 401 (backend refused the operation)
    ├── BackendUnavailableError   → 500 (backend not configured at startup)
    └── BackendError              → 500 (raw Supabase failure, translated by services)

Envelope produced by the handlers:
    {"success": false, "error": "<label>", "message": "<human readable>"}
"""

from typing import Any, Dict, Optional


class HabitApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status the global handler responds with
        error:        Short label placed in the envelope's `error` field
    """

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.context = context or {}
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(HabitApiError):
    """
    Raised when a request body is missing required fields.

    When:    refreshToken omitted, userId/email omitted, malformed JSON.
    HTTP:    400 Bad Request

    Raised BEFORE any backend call so the backend never sees an incomplete request.
    """

    status_code = 400
    error = "Bad Request"

    def __init__(
        self,
        message: str = "Request is missing required fields",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(HabitApiError):
    """
    Raised when the caller's identity cannot be established.

    Two flavours share the 401 status:
        - error="Unauthorized":  header absent or not "Bearer <token>"
        - error="Invalid token": header well-formed but the backend rejected the token
    """

    status_code = 401
    error = "Unauthorized"

    def __init__(
        self,
        message: str = "No valid authorization token provided",
        error: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context, error=error)


class NotFoundError(HabitApiError):
    """
    Raised when a user-owned row does not match the request.

    HTTP:    404 Not Found

    Ownership is enforced inside the query (`user_id = caller`), so "does not
    exist" and "belongs to someone else" both produce zero rows and the same
    message. Never add detail that tells them apart.
    """

    status_code = 404
    error = "Not found"

    def __init__(
        self,
        resource: str = "resource",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(
            message=message or f"The requested {resource} was not found",
            context=ctx,
        )


class UpstreamError(HabitApiError):
    """
    Raised when the backend refused an operation the route depends on.

    HTTP:    Chosen by the raiser — 500 for failed sign-out or profile insert,
             401 for failed token refresh or sign-in, 502 when the Calendar
             API refuses a request.

    The message is the backend's own error message where one exists.
    """

    status_code = 500
    error = "Upstream failure"


class BackendUnavailableError(HabitApiError):
    """
    Raised when a route needs the Supabase handle but startup could not build one.

    HTTP:    500 Internal Server Error (the routes document only 4xx and 500)
    When:    SUPABASE_URL / keys missing; the lifespan logs the problem and keeps serving.
    """

    status_code = 500
    error = "Backend unavailable"

    def __init__(
        self,
        message: str = "The authentication backend is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BackendError(HabitApiError):
    """
    Raised by SupabaseBackend when an auth or table call fails.

    Services catch this and decide what it means for their route
    (e.g. code 23505 on a profile insert is success). If one escapes
    unhandled, the global handler renders a generic 500.

    Attributes:
        code:  Backend error code (Postgres SQLSTATE for table calls), if any
    """

    status_code = 500
    error = "Internal server error"

    def __init__(
        self,
        message: str = "The backend request failed",
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if code:
            ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.code = code
