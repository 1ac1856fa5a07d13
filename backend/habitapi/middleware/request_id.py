"""
Habit Tracker Backend — Request ID Middleware
===============================================

What:  Assigns a short correlation ID to each request and echoes it in X-Request-ID.
Why:   Every log line of one request shares the ID; the frontend can show it
       in error toasts so support can find the matching server logs.
How:   Client-supplied X-Request-ID wins (end-to-end tracing from the UI);
       otherwise the first 8 characters of a UUID4.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
