"""
Habit Tracker Backend — FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn habitapi.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌─────────────┐ ┌──────────────┐ ┌──────────────┐  │
    │  │ /api/auth/* │ │ /api/habit-  │ │ /api/users/  │  │
    │  │ + google    │ │ logs/{id}    │ │ create-prof. │  │
    │  └─────────────┘ └──────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers → envelope                      │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ BadRequest→400 │ Unauthorized→401 │ ...→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (log problems, keep serving)
    3. Connect SupabaseBackend, build the Google OAuth and Calendar clients
       (one shared httpx client), store on app.state

    Shutdown:
    1. Release the Supabase handles
    2. Close the shared Google HTTP client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from habitapi.config import settings
from habitapi.exceptions import HabitApiError
from habitapi.middleware.logging import RequestLoggingMiddleware
from habitapi.middleware.request_id import RequestIDMiddleware, request_id_var
from habitapi.routes import auth, calendar, google, habit_logs, health, users
from habitapi.schemas.common import error_response
from habitapi.services.google_calendar import GoogleCalendarClient
from habitapi.services.google_oauth import GoogleOAuthClient
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every HTTP round trip at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the backend handles on startup and release them on shutdown.

    A missing or unreachable Supabase configuration does not stop the server:
    /health reports "degraded" and backend-bound routes answer 500.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Habit Tracker Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    app.state.backend = None
    if settings.supabase_configured:
        backend = SupabaseBackend(
            url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            service_role_key=settings.supabase_service_role_key,
        )
        try:
            await backend.connect()
        except Exception:
            logger.exception("Could not initialize the Supabase client")
        else:
            app.state.backend = backend

    app.state.google_oauth = GoogleOAuthClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri_resolved,
        scopes=settings.google_calendar_scopes,
        auth_url=settings.google_auth_url,
        token_url=settings.google_token_url,
    )
    app.state.google_calendar = GoogleCalendarClient(
        http_client=app.state.google_oauth.http_client,
        base_url=settings.google_calendar_api_url,
    )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Habit Tracker Backend shutting down...")
    if app.state.backend is not None:
        await app.state.backend.close()
    await app.state.google_oauth.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the response envelope.

    Handler hierarchy:
        HabitApiError (and subclasses) → exc.status_code, exc.error, exc.message
        RequestValidationError          → 400 Bad Request (malformed/missing body)
        StarletteHTTPException          → its own status (unknown route, bad method)
        Exception (fallback)            → 500, generic message, stack trace logged

    Context dicts and stack traces stay in the server log.
    """

    @app.exception_handler(HabitApiError)
    async def handle_app_error(request: Request, exc: HabitApiError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.error, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, exc.error, exc.message)
        return error_response(exc.status_code, exc.error, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %s", rid, exc.errors())
        return error_response(400, "Bad Request", "Request body is missing or malformed")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(
            exc.status_code, "HTTP error", str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "message": "Something went wrong. Please try again later.",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance each call, so tests can build isolated apps and
    set dependency_overrides without touching the module-level `app`.
    """
    app = FastAPI(
        title="Habit Tracker API",
        description=(
            "Session, habit-log and profile endpoints for the habit tracker, "
            "backed by Supabase auth and database, with Google Calendar connection and habit reminders."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,     # Session cookie on the OAuth callback
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(google.router)
    app.include_router(calendar.router)
    app.include_router(habit_logs.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# uvicorn expects `habitapi.main:app` to be importable
app = create_app()
