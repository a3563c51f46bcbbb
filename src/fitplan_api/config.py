"""Configuration settings for the FitPlan API."""
import os
from typing import Literal


EnvironmentType = Literal["development", "staging", "production"]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"

    # Backend
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_JWT_SECRET: str | None = None

    # Session engine
    REST_TIMER_SECONDS: int = 90

    # Exercise catalog
    SEARCH_LIMIT: int = 50
    SEARCH_DEBOUNCE_MS: int = 700
    REMOTE_TIMEOUT_SECONDS: int = 10
    IMPORT_BATCH_SIZE: int = 100

    # Sharing
    SHARE_CODE_MAX_ATTEMPTS: int = 10

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"

        # Backend
        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
        self.SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")

        self.REST_TIMER_SECONDS = _int_env("REST_TIMER_SECONDS", 90)
        self.SEARCH_LIMIT = _int_env("SEARCH_LIMIT", 50)
        self.SEARCH_DEBOUNCE_MS = _int_env("SEARCH_DEBOUNCE_MS", 700)
        self.REMOTE_TIMEOUT_SECONDS = _int_env("REMOTE_TIMEOUT_SECONDS", 10)
        self.IMPORT_BATCH_SIZE = _int_env("IMPORT_BATCH_SIZE", 100)
        self.SHARE_CODE_MAX_ATTEMPTS = _int_env("SHARE_CODE_MAX_ATTEMPTS", 10)

    @property
    def functions_url(self) -> str | None:
        """Base URL of the backend's serverless functions."""
        if not self.SUPABASE_URL:
            return None
        return f"{self.SUPABASE_URL.rstrip('/')}/functions/v1"


settings = Settings()
