"""
Navigation module.

Role-based landing routes and the guards that apply them.

Public API:
- INavigator: Interface to the router
- role_landing_path / resolve_redirect: Redirect policy
- AuthRedirectGuard / RoleGuard: Session-driven guards
- RedirectOptions: Guard behaviour
"""

from .interfaces import INavigator
from .models import ROLE_LANDING_PATHS, RedirectOptions
from .policy import is_auth_path, is_public_path, resolve_redirect, role_landing_path
from .service import AuthRedirectGuard, RoleGuard

__all__ = [
    "INavigator",
    "ROLE_LANDING_PATHS",
    "RedirectOptions",
    "is_auth_path",
    "is_public_path",
    "resolve_redirect",
    "role_landing_path",
    "AuthRedirectGuard",
    "RoleGuard",
]
