"""
Tests for shared models.
"""

import pytest
from pydantic import ValidationError

from shared.models import Pagination, User, UserRole


class TestUser:
    """Tests for the canonical User model."""

    def test_create_with_required_fields(self):
        """Should create user with only email and role."""
        user = User(email="test@example.com", role=UserRole.ATTENDEE)
        assert user.id == ""
        assert user.name == ""
        assert user.phone_number is None

    def test_role_from_string(self):
        """Should accept the backend's role strings."""
        user = User(email="test@example.com", role="SECURITY")
        assert user.role == UserRole.SECURITY

    def test_requires_email_and_role(self):
        """Email and role are mandatory."""
        with pytest.raises(ValidationError):
            User(email="test@example.com")
        with pytest.raises(ValidationError):
            User(role=UserRole.ADMIN)

    def test_ignores_extra_fields(self):
        """Unknown keys should be dropped."""
        user = User(email="test@example.com", role="ADMIN", avatar="x.png")
        assert not hasattr(user, "avatar")

    def test_is_immutable(self):
        """User should be frozen."""
        user = User(email="test@example.com", role="ADMIN")
        with pytest.raises(ValidationError):
            user.name = "Changed"


class TestPagination:
    def test_defaults(self):
        pagination = Pagination()
        assert pagination.current_page == 1
        assert pagination.per_page == 20
        assert pagination.has_next is False

    def test_from_response(self):
        pagination = Pagination.model_validate({"total": 45, "pages": 3, "current_page": 2})
        assert pagination.pages == 3
        assert pagination.has_prev is False
