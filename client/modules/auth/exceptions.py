"""
Authentication module exceptions.

Validation errors are raised before any request is made; the others wrap
what the backend reported.
"""

from shared.exceptions import AuthenticationError, AuthorizationError, ValidationError


class InvalidUserPayloadError(ValidationError):
    """Raised when a user payload lacks an email or a known role."""

    def __init__(self, message: str = "User data is missing an email or role"):
        super().__init__(message, code="INVALID_USER_PAYLOAD")


class MissingFieldError(ValidationError):
    """Raised when a required form field is blank."""

    def __init__(self, field: str):
        label = field.replace("_", " ")
        super().__init__(
            f"Please fill in the {label} field",
            code="MISSING_FIELD",
            details={"field": field},
        )


class WeakPasswordError(ValidationError):
    """Raised when a new password fails the strength rules."""

    def __init__(self, message: str):
        super().__init__(message, code="WEAK_PASSWORD")


class PasswordMismatchError(ValidationError):
    """Raised when password and confirmation differ."""

    def __init__(self, message: str = "Passwords do not match"):
        super().__init__(message, code="PASSWORD_MISMATCH")


class LoginFailedError(AuthenticationError):
    """Raised when the backend rejects the credentials."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="LOGIN_FAILED")


class InvalidResetTokenError(AuthenticationError):
    """Raised when a password reset token is invalid or expired."""

    def __init__(self, message: str = "Invalid or expired reset token"):
        super().__init__(message, code="INVALID_RESET_TOKEN")


class AdminAlreadyExistsError(AuthorizationError):
    """Raised when bootstrap admin registration is refused (HTTP 403)."""

    def __init__(self, message: str = "An admin already exists"):
        super().__init__(message, code="ADMIN_EXISTS")


class InvalidStaffRoleError(ValidationError):
    """Raised when staff registration is asked for a role admins cannot create."""

    def __init__(self, role: str):
        super().__init__(
            f"Cannot register a staff account with role {role}",
            code="INVALID_STAFF_ROLE",
            details={"role": role},
        )
