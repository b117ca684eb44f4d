"""
Centralized configuration for the Pulse client.

All settings are loaded from environment variables with sensible defaults.
Timeouts and delays are in seconds and mirror what the web client uses.
"""

from dataclasses import dataclass
from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class SessionTimings:
    """
    Timer values used by the session store, dialog and redirect guard.

    Kept separate from Settings so tests can inject short delays.
    """

    profile_timeout: float = 10.0
    logout_timeout: float = 5.0
    admin_check_timeout: float = 5.0
    reset_token_timeout: float = 8.0
    request_timeout: float = 15.0

    storage_debounce: float = 0.2
    state_event_debounce: float = 0.1
    login_sync_delay: float = 0.5
    redirect_delay: float = 0.1
    signup_login_delay: float = 1.5
    reset_error_delay: float = 3.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Pulse Client"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Remote API
    api_url: str = "http://localhost:5000"

    # Frontend URLs (for OAuth return redirects)
    frontend_url: str = "http://localhost:5173"

    # Timeouts
    profile_timeout: float = 10.0
    logout_timeout: float = 5.0
    admin_check_timeout: float = 5.0
    reset_token_timeout: float = 8.0
    request_timeout: float = 15.0

    # Debounce windows and delays
    storage_debounce: float = 0.2
    state_event_debounce: float = 0.1
    login_sync_delay: float = 0.5
    redirect_delay: float = 0.1
    signup_login_delay: float = 1.5
    reset_error_delay: float = 3.0

    # Routing
    logout_redirect_path: str = "/"
    public_paths: list[str] = [
        "/",
        "/events",
        "/venues",
        "/partnerships",
        "/about",
        "/artists",
    ]

    @field_validator("api_url", "frontend_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def timings(self) -> SessionTimings:
        """Build the timer value object from the loaded settings."""
        return SessionTimings(
            profile_timeout=self.profile_timeout,
            logout_timeout=self.logout_timeout,
            admin_check_timeout=self.admin_check_timeout,
            reset_token_timeout=self.reset_token_timeout,
            request_timeout=self.request_timeout,
            storage_debounce=self.storage_debounce,
            state_event_debounce=self.state_event_debounce,
            login_sync_delay=self.login_sync_delay,
            redirect_delay=self.redirect_delay,
            signup_login_delay=self.signup_login_delay,
            reset_error_delay=self.reset_error_delay,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
