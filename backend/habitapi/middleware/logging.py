"""
Habit Tracker Backend — Request Logging Middleware
====================================================

What:  One access-log line per request: method, path, status, duration, request ID.
Why:   uvicorn's access log has no request ID and no duration.

Privacy:
    ✅ Log: method, path, status, duration, client IP, request ID
    ❌ Never log: Authorization header, cookies, request bodies (tokens, passwords)

Query strings are not logged either: the OAuth callback carries a single-use
authorization code in `?code=`.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from habitapi.middleware.request_id import request_id_var

logger = logging.getLogger("habitapi.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level follows the status class:
        5xx → ERROR, 4xx → WARNING, 2xx/3xx → INFO
    /health is skipped entirely (health checks would drown everything else).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
