"""
Authentication service implementation.

Calls the Pulse backend's /auth endpoints over the shared, cookie-carrying
API client.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

from shared.config import SessionTimings, get_settings
from shared.exceptions import ApiUnavailableError
from shared.http import (
    ApiClient,
    extract_error_message,
    get_api_client,
    json_body,
    parse_body,
    raise_for_api_error,
)
from shared.models import User, UserRole

from .interfaces import IAuthApi
from .models import (
    AdminCheckResponse,
    LoginRequest,
    ProfileUpdate,
    RegistrationRequest,
    normalize_user,
    parse_role,
)
from .exceptions import (
    AdminAlreadyExistsError,
    InvalidResetTokenError,
    InvalidStaffRoleError,
    LoginFailedError,
)

logger = logging.getLogger(__name__)

# Statuses the login endpoint uses for rejected credentials
LOGIN_REJECTED_STATUSES = (400, 401, 403)

# Staff roles an admin can create, and the endpoint for each
STAFF_REGISTRATION_PATHS = {
    UserRole.ADMIN: "/auth/admin/register-admin",
    UserRole.ORGANIZER: "/auth/admin/register-organizer",
    UserRole.SECURITY: "/auth/admin/register-security",
}

# Frontend route the backend sends the browser back to after Google sign-in
GOOGLE_CALLBACK_PATH = "/auth/callback/google"


class ProfileFetcher:
    """
    Fetches the current user's profile.

    Any failure means "not authenticated": the result is None and nothing
    is raised. Only one fetch runs at a time; a call made while another is
    in flight returns None without sending a request.
    """

    PROFILE_PATH = "/auth/profile"

    def __init__(self, api: ApiClient, timeout: float = 10.0):
        self._api = api
        self._timeout = timeout
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def fetch(self) -> Optional[User]:
        if self._in_flight:
            logger.debug("Profile fetch already in flight, skipping")
            return None

        self._in_flight = True
        try:
            response = await self._api.get(self.PROFILE_PATH, timeout=self._timeout)
            if response.status_code != 200:
                logger.debug(f"Profile fetch returned {response.status_code}, not authenticated")
                return None

            user = normalize_user(json_body(response))
            if user is None:
                logger.warning("Profile response is missing email or role, ignoring it")
            return user
        except ApiUnavailableError as e:
            logger.warning(f"Profile fetch failed, treating as not authenticated: {e.message}")
            return None
        finally:
            self._in_flight = False


class AuthApiService(IAuthApi):
    """
    Implementation of the auth API client.

    Errors reported by the backend are surfaced with the server's own
    message when the body has one.
    """

    def __init__(
        self,
        api: Optional[ApiClient] = None,
        timings: Optional[SessionTimings] = None,
        frontend_url: Optional[str] = None,
    ):
        settings = get_settings()
        self._api = api or get_api_client()
        self._timings = timings or settings.timings()
        self._frontend_url = (frontend_url or settings.frontend_url).rstrip("/")
        self._profile_fetcher = ProfileFetcher(self._api, self._timings.profile_timeout)

    @property
    def profile_fetch_in_flight(self) -> bool:
        return self._profile_fetcher.in_flight

    async def fetch_profile(self) -> Optional[User]:
        return await self._profile_fetcher.fetch()

    async def check_admin_exists(self) -> bool:
        response = await self._api.get(
            "/auth/check-admin", timeout=self._timings.admin_check_timeout
        )
        raise_for_api_error(response, "Failed to check admin status")
        return parse_body(
            AdminCheckResponse, json_body(response), response, "admin check"
        ).admin_exists

    async def login(self, email: str, password: str) -> dict[str, Any]:
        response = await self._api.post(
            "/auth/login",
            json=LoginRequest(email=email, password=password).model_dump(),
        )
        if response.status_code in LOGIN_REJECTED_STATUSES:
            raise LoginFailedError(extract_error_message(response, "Invalid email or password"))
        raise_for_api_error(response, "Login failed")
        return _as_dict(json_body(response))

    async def register(self, request: RegistrationRequest) -> dict[str, Any]:
        response = await self._api.post("/auth/register", json=request.to_payload())
        raise_for_api_error(response, "Registration failed")
        return _as_dict(json_body(response))

    async def register_first_admin(self, request: RegistrationRequest) -> dict[str, Any]:
        response = await self._api.post(
            "/auth/register-first-admin", json=request.to_payload()
        )
        if response.status_code == 403:
            raise AdminAlreadyExistsError(
                extract_error_message(response, "An admin already exists")
            )
        raise_for_api_error(response, "Admin registration failed")
        return _as_dict(json_body(response))

    async def forgot_password(self, email: str) -> str:
        response = await self._api.post("/auth/forgot-password", json={"email": email})
        raise_for_api_error(response, "Failed to send reset email")
        return _message(
            response, "If an account exists for that email, a reset link has been sent"
        )

    async def validate_reset_token(self, token: str) -> None:
        response = await self._api.get(
            f"/auth/reset-password/{quote(token, safe='')}",
            timeout=self._timings.reset_token_timeout,
        )
        if not response.is_success:
            raise InvalidResetTokenError(
                extract_error_message(response, "Invalid or expired reset token")
            )

    async def reset_password(self, token: str, password: str) -> str:
        response = await self._api.post(
            f"/auth/reset-password/{quote(token, safe='')}",
            json={"password": password},
        )
        raise_for_api_error(response, "Failed to reset password")
        return _message(response, "Password reset successfully")

    async def logout(self) -> None:
        response = await self._api.post("/auth/logout", timeout=self._timings.logout_timeout)
        raise_for_api_error(response, "Logout failed")

    def google_login_url(self) -> str:
        return self._api.build_url(
            "/auth/login/google",
            {"redirect": f"{self._frontend_url}{GOOGLE_CALLBACK_PATH}"},
        )

    async def update_profile(self, update: ProfileUpdate) -> dict[str, Any]:
        response = await self._api.put("/auth/profile", json=update.to_payload())
        raise_for_api_error(response, "Failed to update profile")
        return _as_dict(json_body(response))

    async def register_staff(self, role: UserRole, request: RegistrationRequest) -> str:
        staff_role = parse_role(role)
        if staff_role not in STAFF_REGISTRATION_PATHS:
            raise InvalidStaffRoleError(str(getattr(role, "value", role)))

        path = STAFF_REGISTRATION_PATHS[staff_role]
        response = await self._api.post(path, json=request.to_payload())
        label = staff_role.value.lower()
        raise_for_api_error(response, f"Failed to register {label}")
        logger.info(f"Registered {label} account {request.email}")
        return _message(response, f"{label.capitalize()} registered successfully")

    async def list_users(self) -> list[User]:
        response = await self._api.get("/auth/users")
        raise_for_api_error(response, "Failed to fetch users")
        body = json_body(response)
        if isinstance(body, dict):
            body = body.get("users")
        if not isinstance(body, list):
            return []

        users = []
        for item in body:
            user = normalize_user(item)
            if user is None:
                logger.warning("Skipping user entry without email or role")
                continue
            users.append(user)
        return users


def _as_dict(body: Any) -> dict[str, Any]:
    return body if isinstance(body, dict) else {}


def _message(response, fallback: str) -> str:
    body = _as_dict(json_body(response))
    for key in ("message", "msg"):
        message = body.get(key)
        if isinstance(message, str) and message:
            return message
    return fallback


# Module-level instance getter
_service_instance: Optional[AuthApiService] = None


def get_auth_service() -> AuthApiService:
    """Get the auth service singleton."""
    global _service_instance
    if _service_instance is None:
        _service_instance = AuthApiService()
    return _service_instance


def reset_auth_service() -> None:
    """Reset the auth service singleton (for testing)."""
    global _service_instance
    _service_instance = None
