"""
Shared infrastructure for the Pulse client.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- http: Pulse API client factory
- scheduling: Debounce and delayed-call helpers
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, SessionTimings, get_settings
from .http import ApiClient, get_api_client, reset_api_client
from .scheduling import Debouncer, call_later
from .exceptions import (
    PulseError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    ApiError,
    ApiUnavailableError,
)
from .models import User, UserRole, Pagination

__all__ = [
    "Settings",
    "SessionTimings",
    "get_settings",
    "ApiClient",
    "get_api_client",
    "reset_api_client",
    "Debouncer",
    "call_later",
    "PulseError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "ApiError",
    "ApiUnavailableError",
    "User",
    "UserRole",
    "Pagination",
]
