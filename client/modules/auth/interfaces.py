"""
Authentication module interface.

The session store and the auth dialog depend on IAuthApi, not the concrete
implementation. This enables testing with mocks.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import User, UserRole

from .models import ProfileUpdate, RegistrationRequest


@runtime_checkable
class IAuthApi(Protocol):
    """
    Interface to the remote auth endpoints.

    fetch_profile never raises; every other method raises ApiError for
    server-reported failures and ApiUnavailableError when the server
    cannot be reached.
    """

    @property
    def profile_fetch_in_flight(self) -> bool:
        """Whether a profile fetch is currently running."""
        ...

    async def fetch_profile(self) -> Optional[User]:
        """
        Fetch and normalize the current user's profile.

        Returns:
            User if the session is authenticated, None otherwise
            (including while another fetch is in flight)
        """
        ...

    async def check_admin_exists(self) -> bool:
        """Ask whether a bootstrap admin account already exists."""
        ...

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """
        Sign in with email and password.

        Returns:
            Response body; either {"user": {...}} or the user fields directly
        """
        ...

    async def register(self, request: RegistrationRequest) -> dict[str, Any]:
        """Create an attendee account."""
        ...

    async def register_first_admin(self, request: RegistrationRequest) -> dict[str, Any]:
        """
        Create the first admin account.

        Raises:
            AdminAlreadyExistsError: If an admin already exists (HTTP 403)
        """
        ...

    async def forgot_password(self, email: str) -> str:
        """Request a reset email; returns the server's message."""
        ...

    async def validate_reset_token(self, token: str) -> None:
        """
        Check a password reset token.

        Raises:
            InvalidResetTokenError: If the token is invalid or expired
        """
        ...

    async def reset_password(self, token: str, password: str) -> str:
        """Set a new password with a reset token; returns the server's message."""
        ...

    async def logout(self) -> None:
        """End the server-side session."""
        ...

    def google_login_url(self) -> str:
        """
        Absolute URL the browser must be sent to for Google sign-in.

        Carries the frontend callback the backend redirects back to.
        """
        ...

    async def update_profile(self, update: ProfileUpdate) -> dict[str, Any]:
        """Update the current user's profile fields."""
        ...

    async def register_staff(self, role: UserRole, request: RegistrationRequest) -> str:
        """
        Create an admin, organizer or security account (admin only).

        Returns:
            The server's confirmation message

        Raises:
            InvalidStaffRoleError: For any other role; nothing is sent
        """
        ...

    async def list_users(self) -> list[User]:
        """All user accounts (admin only); unusable entries are skipped."""
        ...
