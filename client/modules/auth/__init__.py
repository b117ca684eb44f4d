"""
Authentication module.

Fetches and normalizes the current user's profile and wraps the backend's
/auth endpoints (login, registration, password reset, Google sign-in,
admin-only staff registration and user listing).

Public API:
- IAuthApi: Interface for auth operations
- normalize_user / require_user: Profile payload normalization
- Form models: RegistrationRequest, ProfileUpdate
- Auth exceptions: InvalidUserPayloadError, WeakPasswordError, etc.
"""

from .interfaces import IAuthApi
from .models import (
    LoginRequest,
    RegistrationRequest,
    ProfileUpdate,
    AdminCheckResponse,
    normalize_user,
    require_user,
)
from .exceptions import (
    InvalidUserPayloadError,
    MissingFieldError,
    WeakPasswordError,
    PasswordMismatchError,
    LoginFailedError,
    InvalidResetTokenError,
    AdminAlreadyExistsError,
    InvalidStaffRoleError,
)

__all__ = [
    # Interface
    "IAuthApi",
    # Models
    "LoginRequest",
    "RegistrationRequest",
    "ProfileUpdate",
    "AdminCheckResponse",
    "normalize_user",
    "require_user",
    # Exceptions
    "InvalidUserPayloadError",
    "MissingFieldError",
    "WeakPasswordError",
    "PasswordMismatchError",
    "LoginFailedError",
    "InvalidResetTokenError",
    "AdminAlreadyExistsError",
    "InvalidStaffRoleError",
]
