"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Roles issued by the platform backend."""

    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"
    ATTENDEE = "ATTENDEE"
    SECURITY = "SECURITY"


class User(BaseModel):
    """
    Canonical user identity held by the session store.

    Built from the heterogeneous profile payloads by
    modules.auth.models.normalize_user; never constructed half-filled.
    """

    id: str = Field(default="", description="User ID (id or user_id)")
    name: str = Field(default="", description="Display name (name, full_name or username)")
    email: str = Field(..., description="User's email address")
    role: UserRole = Field(..., description="Platform role")
    phone_number: Optional[str] = Field(None, description="Phone number")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }


class Pagination(BaseModel):
    """Pagination block returned by the list endpoints."""

    total: int = 0
    pages: int = 0
    current_page: int = 1
    per_page: int = 20
    has_next: bool = False
    has_prev: bool = False
