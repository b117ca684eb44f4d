"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    PulseError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    ApiUnavailableError,
    ApiError,
)
from modules.auth.exceptions import AdminAlreadyExistsError, LoginFailedError, MissingFieldError
from modules.events.exceptions import DraftNotFoundError


class TestPulseError:
    def test_message_is_display_text(self):
        """str() and .message should both be the user-facing text."""
        error = PulseError("Please fill in the email field")
        assert error.message == "Please fill in the email field"
        assert str(error) == error.message

    def test_code_defaults_to_class_name(self):
        assert PulseError("x").code == "PulseError"
        assert NotFoundError("x").code == "NotFoundError"

    def test_to_dict_for_debug_output(self):
        """to_dict should carry code, message and details for the DEBUG view."""
        error = PulseError("Boom", code="BOOM", details={"path": "/events"})
        assert error.to_dict() == {
            "error": "BOOM",
            "message": "Boom",
            "details": {"path": "/events"},
        }

    def test_details_are_not_shared(self):
        first = PulseError("a")
        first.details["x"] = 1
        assert PulseError("b").details == {}


class TestCategories:
    @pytest.mark.parametrize("error, category", [
        (MissingFieldError("email"), ValidationError),
        (LoginFailedError(), AuthenticationError),
        (AdminAlreadyExistsError(), AuthorizationError),
        (DraftNotFoundError("17"), NotFoundError),
        (ApiUnavailableError(), ExternalServiceError),
    ])
    def test_module_errors_fall_into_categories(self, error, category):
        """Module errors should be catchable by category and as PulseError."""
        assert isinstance(error, category)
        assert isinstance(error, PulseError)


class TestApiErrors:
    def test_unavailable_default_message(self):
        error = ApiUnavailableError()
        assert error.message == "Unable to reach the server"
        assert error.code == "API_UNAVAILABLE"
        assert error.details == {"service": "pulse-api"}

    def test_unavailable_custom_message(self):
        assert ApiUnavailableError("The server took too long to respond").message == (
            "The server took too long to respond"
        )

    def test_api_error_keeps_server_message_and_status(self):
        """ApiError should expose the status next to the server's message."""
        error = ApiError("Email already registered", status_code=409)
        assert error.message == "Email already registered"
        assert error.status_code == 409
        assert error.code == "API_ERROR"
        assert error.to_dict()["details"] == {"service": "pulse-api", "status_code": 409}

    @pytest.mark.parametrize("status, expected", [(200, False), (404, False), (500, True), (503, True)])
    def test_is_server_error(self, status, expected):
        assert ApiError("x", status_code=status).is_server_error is expected
