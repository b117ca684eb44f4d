"""
Errors raised by the Pulse client.

Services raise these instead of httpx or pydantic errors. The auth dialog
turns them into destructive toasts and the CLI prints their message and
exits with status 1, so `message` is always safe to show to a user.
"""

from typing import Optional, Any


class PulseError(Exception):
    """
    Root of every error the client surfaces.

    `code` is a stable machine name (defaults to the class name) and
    `details` holds context for logs, such as the HTTP status.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Debug view printed by the CLI when DEBUG is set."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(PulseError):
    """An event or draft the caller asked for does not exist."""


class ValidationError(PulseError):
    """Form input was rejected locally; no request was sent."""


class AuthenticationError(PulseError):
    """The server refused the credentials or reset token."""


class AuthorizationError(PulseError):
    """The signed-in user may not perform the action."""


class ExternalServiceError(PulseError):
    """A call to a remote service failed; `service` names it."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class ApiUnavailableError(ExternalServiceError):
    """
    No usable response from the Pulse API.

    Raised for connection failures, timeouts and bodies httpx cannot decode.
    Profile fetches treat it as "not signed in".
    """

    def __init__(self, message: str = "Unable to reach the server"):
        super().__init__(message, service="pulse-api", code="API_UNAVAILABLE")


class ApiError(ExternalServiceError):
    """
    The Pulse API answered, but not with what the operation needs.

    Either a non-2xx status, whose message is the server's own when the body
    carries one, or a 2xx body that does not match the expected shape.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service="pulse-api", code=code or "API_ERROR", details=details)
        self.status_code = status_code
        self.details["status_code"] = status_code

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500
