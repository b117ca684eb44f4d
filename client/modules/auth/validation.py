"""Client-side form validation, run before any request is sent."""

import re
from typing import Optional

from shared.exceptions import ValidationError

from .exceptions import MissingFieldError, PasswordMismatchError, WeakPasswordError

MIN_PASSWORD_LENGTH = 8

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_LETTER_RE = re.compile(r"[A-Za-z]")
_DIGIT_RE = re.compile(r"\d")


def require_fields(**fields: Optional[str]) -> None:
    """Raise MissingFieldError for the first blank field, in argument order."""
    for name, value in fields.items():
        if value is None or not str(value).strip():
            raise MissingFieldError(name)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email.strip()))


def validate_email(email: str) -> None:
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address", code="INVALID_EMAIL")


def validate_new_password(password: str) -> None:
    """
    Check a new password: at least 8 characters, with a letter and a digit.

    "abcd1234" passes; "abcdefgh" and "short1" do not.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if not (_LETTER_RE.search(password) and _DIGIT_RE.search(password)):
        raise WeakPasswordError("Password must contain both letters and numbers")


def validate_password_confirmation(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise PasswordMismatchError()
