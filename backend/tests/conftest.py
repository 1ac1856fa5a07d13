"""
Habit Tracker Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests never reach Supabase or Google; both are replaced with mocks
       through FastAPI's dependency_overrides.

Fixture Hierarchy (all function-scoped):
    ├── mock_backend:   MagicMock(spec=SupabaseBackend) — async methods are AsyncMocks
    ├── mock_google:    MagicMock(spec=GoogleOAuthClient)
    ├── mock_calendar:  MagicMock(spec=GoogleCalendarClient)
    ├── auth_user:      The user a valid bearer token resolves to
    ├── auth_headers:   {"Authorization": "Bearer valid-token"}
    ├── app:            Fresh FastAPI app wired to the mocks
    └── test_client:    HTTPX AsyncClient over ASGITransport
"""

import os
from types import SimpleNamespace

# Override settings for testing BEFORE any app imports
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["SITE_URL"] = "http://localhost:3000"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from habitapi.dependencies import (  # noqa: E402
    get_google_calendar,
    get_google_oauth,
    get_optional_backend,
)
from habitapi.main import create_app  # noqa: E402
from habitapi.services.google_calendar import GoogleCalendarClient  # noqa: E402
from habitapi.services.google_oauth import GoogleOAuthClient  # noqa: E402
from habitapi.services.supabase_backend import SupabaseBackend  # noqa: E402

VALID_TOKEN = "valid-token"


@pytest.fixture
def auth_user():
    """The auth user VALID_TOKEN resolves to."""
    return SimpleNamespace(id="user-1", email="owner@example.com")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture
def mock_backend(auth_user):
    """
    Mock SupabaseBackend.

    get_user() accepts VALID_TOKEN and rejects everything else, like the real
    auth backend does.
    """
    backend = MagicMock(spec=SupabaseBackend)

    async def get_user(token):
        return auth_user if token == VALID_TOKEN else None

    backend.get_user.side_effect = get_user
    backend.sign_out.return_value = None
    backend.delete_owned.return_value = []
    backend.admin_insert.return_value = []
    backend.upsert_owned.return_value = []
    backend.insert_owned.return_value = []
    backend.select_owned.return_value = []
    return backend


@pytest.fixture
def mock_google():
    google = MagicMock(spec=GoogleOAuthClient)
    google.configured = True
    google.authorization_url.return_value = "https://accounts.google.com/o/oauth2/v2/auth?client_id=x"
    return google


@pytest.fixture
def mock_calendar():
    return MagicMock(spec=GoogleCalendarClient)


@pytest.fixture
def app(mock_backend, mock_google, mock_calendar):
    """A fresh app (lifespan not run) whose handles are the mocks."""
    application = create_app()
    application.dependency_overrides[get_optional_backend] = lambda: mock_backend
    application.dependency_overrides[get_google_oauth] = lambda: mock_google
    application.dependency_overrides[get_google_calendar] = lambda: mock_calendar
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    raise_app_exceptions=False: unexpected errors must come back as the 500
    envelope rather than propagate into the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
