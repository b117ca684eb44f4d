"""
Authentication module data models.

Request bodies for the auth endpoints and the profile normalization that
turns the backend's heterogeneous user payloads into a canonical User.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field

from shared.models import User, UserRole

from .exceptions import InvalidUserPayloadError


def parse_role(value: Any) -> Optional[UserRole]:
    """Match a role string case-insensitively; None for unknown roles."""
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UserRole(value.strip().upper())
    except ValueError:
        return None


def normalize_user(data: Any) -> Optional[User]:
    """
    Normalize a profile payload into a User.

    Accepts `id` or `user_id`, and `name`, `full_name` or `username`.
    Payloads wrapped as {"user": {...}} are unwrapped first.

    Returns:
        User, or None when email or a known role is missing
    """
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("user"), dict):
        data = data["user"]

    email = data.get("email")
    role = parse_role(data.get("role"))
    if not email or role is None:
        return None

    raw_id = data.get("id")
    if raw_id is None:
        raw_id = data.get("user_id")

    name = data.get("name") or data.get("full_name") or data.get("username") or ""
    phone_number = data.get("phone_number")

    return User(
        id="" if raw_id is None else str(raw_id),
        name=str(name),
        email=str(email),
        role=role,
        phone_number=None if phone_number is None else str(phone_number),
    )


def require_user(data: Any) -> User:
    """Like normalize_user, but raises InvalidUserPayloadError instead of returning None."""
    user = normalize_user(data)
    if user is None:
        raise InvalidUserPayloadError()
    return user


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class RegistrationRequest(BaseModel):
    """
    Sign-up form data.

    Used for both POST /auth/register and POST /auth/register-first-admin.
    confirm_password is only checked client-side and never sent.
    """

    full_name: str = Field(default="", description="Full name")
    email: str = Field(default="", description="Email address")
    phone_number: str = Field(default="", description="Phone number")
    password: str = Field(default="", description="New password")
    confirm_password: Optional[str] = Field(None, description="Password confirmation")

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(exclude={"confirm_password"})


class ProfileUpdate(BaseModel):
    """Body of PUT /auth/profile; unset fields are left unchanged."""

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class AdminCheckResponse(BaseModel):
    """Response of GET /auth/check-admin."""

    admin_exists: bool = Field(..., description="Whether an admin account exists")
