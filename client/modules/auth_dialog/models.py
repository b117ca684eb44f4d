"""Auth dialog views and notification variants."""

from enum import Enum


class AuthView(str, Enum):
    """Forms the auth dialog can show."""

    SIGNIN = "signin"
    SIGNUP = "signup"
    ADMIN_REGISTRATION = "admin-registration"
    FORGOT_PASSWORD = "forgot-password"
    RESET_PASSWORD = "reset-password"


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


# Storage key remembering where to return after Google sign-in
PRE_AUTH_URL_KEY = "preAuthUrl"

# Source tag on events dispatched by the dialog
DIALOG_SOURCE = "auth-dialog"
