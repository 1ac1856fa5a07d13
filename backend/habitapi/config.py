"""
Habit Tracker Backend — Application Configuration
===================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.

Required in production:
    SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY, SITE_URL,
    GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET
"""

from typing import List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults; the Supabase and Google
    credentials default to empty strings and are reported by
    validate_required_for_production() at startup.
    """

    # ── Supabase (managed auth + database) ────────────────────────────────
    # What: Project URL, e.g. https://abcd1234.supabase.co
    supabase_url: str = Field(default="", description="Supabase project URL")

    # What: Public (anon) key. Requests made with it are subject to row-level security.
    supabase_anon_key: str = Field(default="", description="Supabase public anon key")

    # What: Service-role key. Bypasses row-level security. Server-side only.
    supabase_service_role_key: str = Field(
        default="",
        description="Supabase service-role key for privileged writes",
    )

    # Table names, overridable for staging schemas
    users_table: str = Field(default="users")
    habit_logs_table: str = Field(default="habit_logs")
    oauth_tokens_table: str = Field(default="user_google_tokens")

    # What: Cookie holding the browser session (read by the Google OAuth callback)
    # Empty → the Supabase auth-helpers name, see session_cookie_name_resolved
    session_cookie_name: str = Field(default="")

    @property
    def supabase_project_ref(self) -> str:
        """`abcd1234` for https://abcd1234.supabase.co"""
        host = urlparse(self.supabase_url).hostname or ""
        return host.split(".")[0]

    @property
    def session_cookie_name_resolved(self) -> str:
        if self.session_cookie_name:
            return self.session_cookie_name
        if self.supabase_project_ref:
            return f"sb-{self.supabase_project_ref}-auth-token"
        return "sb-access-token"

    # Habit reminders created in Google Calendar, one row per event
    calendar_events_table: str = Field(default="habit_calendar_events")

    # ── Public site ───────────────────────────────────────────────────────
    # What: Absolute base URL of the frontend, used to build redirect targets
    site_url: str = Field(default="http://localhost:3000")

    @field_validator("site_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Redirect targets are built as f"{site_url}/path"."""
        return v.rstrip("/")

    # ── Google Calendar OAuth ─────────────────────────────────────────────
    google_client_id: str = Field(default="")
    google_client_secret: str = Field(default="")

    # What: Must exactly match the redirect URI registered in Google Cloud Console
    # Empty → derived from site_url (see google_redirect_uri_resolved)
    google_redirect_uri: str = Field(default="")

    google_auth_url: str = Field(default="https://accounts.google.com/o/oauth2/v2/auth")
    google_token_url: str = Field(default="https://oauth2.googleapis.com/token")

    # Format: Space-separated scope URLs (as Google expects them)
    google_calendar_scopes: str = Field(
        default=(
            "https://www.googleapis.com/auth/calendar "
            "https://www.googleapis.com/auth/calendar.events"
        )
    )

    google_calendar_api_url: str = Field(default="https://www.googleapis.com/calendar/v3")

    # What: IANA zone sent with reminder events; Google expands RRULEs in it
    reminder_time_zone: str = Field(default="America/New_York")

    @property
    def google_redirect_uri_resolved(self) -> str:
        return self.google_redirect_uri or f"{self.site_url}/api/auth/google/callback"

    # ── Internal endpoints ────────────────────────────────────────────────
    # What: Shared secret for server-to-server calls (e.g. signup trigger → create-profile)
    # None: the endpoint stays open, matching the frontend's signup flow
    internal_api_key: Optional[str] = Field(default=None)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # SUPABASE_URL and supabase_url both work
        "extra": "ignore",
    }

    @property
    def supabase_configured(self) -> bool:
        return bool(
            self.supabase_url and self.supabase_anon_key and self.supabase_service_role_key
        )

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.supabase_url:
            errors.append("SUPABASE_URL is not set.")
        if not self.supabase_anon_key:
            errors.append("SUPABASE_ANON_KEY is not set.")
        if not self.supabase_service_role_key:
            errors.append(
                "SUPABASE_SERVICE_ROLE_KEY is not set. "
                "Find it under Project Settings → API in the Supabase dashboard."
            )
        if not self.google_client_id or not self.google_client_secret:
            errors.append(
                "GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET are not set; "
                "calendar connection will fail."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
