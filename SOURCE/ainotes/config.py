"""
Configuration module for the notes client.

The application reads its configuration from environment variables once
at startup, with defaults that make local development simple.
"""

from __future__ import annotations

from functools import lru_cache


class Settings:
    """Defines runtime configuration for the notes client."""

    # Supabase (auth + REST)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    notes_table: str = "notes"
    oauth_provider: str = "github"
    app_url: str = "http://localhost:8501"

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # UI / transport
    notification_seconds: float = 3.0
    request_timeout_seconds: int = 30
    log_level: str = "INFO"

    def update_from_env(self) -> None:
        """Override defaults with values from the environment."""
        import os

        self.supabase_url = os.getenv("SUPABASE_URL", self.supabase_url).rstrip("/")
        self.supabase_anon_key = os.getenv("SUPABASE_ANON_KEY", self.supabase_anon_key)
        self.notes_table = os.getenv("NOTES_TABLE", self.notes_table)
        self.oauth_provider = os.getenv("OAUTH_PROVIDER", self.oauth_provider)
        self.app_url = os.getenv("APP_URL", self.app_url)

        self.gemini_api_key = os.getenv("GEMINI_API_KEY", self.gemini_api_key)
        self.gemini_model = os.getenv("GEMINI_MODEL", self.gemini_model)
        self.gemini_base_url = os.getenv(
            "GEMINI_BASE_URL", self.gemini_base_url
        ).rstrip("/")

        self.notification_seconds = float(
            os.getenv("NOTIFICATION_SECONDS", str(self.notification_seconds))
        )
        self.request_timeout_seconds = int(
            os.getenv("REQUEST_TIMEOUT_SECONDS", str(self.request_timeout_seconds))
        )
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url}/auth/v1"

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url}/rest/v1"


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of Settings populated from environment."""
    settings = Settings()
    settings.update_from_env()
    return settings


__all__ = ["Settings", "get_settings"]
