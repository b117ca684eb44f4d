"""
Auth dialog module.

View-state controller for the sign-in, sign-up, admin registration,
forgot-password and reset-password forms, plus Google sign-in.

Public API:
- AuthDialog: The controller
- AuthView: Views the dialog can show
- INotifier / IKeyValueStorage: Collaborator interfaces
- MemoryStorage: Default key-value storage
"""

from .interfaces import IKeyValueStorage, INotifier
from .models import AuthView, ToastVariant, PRE_AUTH_URL_KEY
from .storage import MemoryStorage
from .service import AuthDialog
from .urls import extract_reset_token, is_google_auth_return, strip_query_params

__all__ = [
    "AuthDialog",
    "AuthView",
    "ToastVariant",
    "PRE_AUTH_URL_KEY",
    "IKeyValueStorage",
    "INotifier",
    "MemoryStorage",
    "extract_reset_token",
    "is_google_auth_return",
    "strip_query_params",
]
