"""
Redirect policy.

Pure functions deciding where a user should be sent for a given session
snapshot and location. The guards in service.py apply them.
"""

from typing import Iterable, Optional, Union
from urllib.parse import urlsplit

from shared.models import UserRole
from modules.auth.models import parse_role
from modules.session.models import SessionSnapshot

from .models import AUTH_PATH_PREFIXES, ROLE_LANDING_PATHS, RedirectOptions


def role_landing_path(role: Union[UserRole, str]) -> str:
    """Dashboard route for a role; unknown roles land on the overview tab."""
    parsed = parse_role(role)
    if parsed is None:
        return ROLE_LANDING_PATHS[UserRole.ATTENDEE]
    return ROLE_LANDING_PATHS[parsed]


def is_auth_path(path: str) -> bool:
    return "/auth" in path or path.startswith(AUTH_PATH_PREFIXES)


def is_public_path(path: str, public_paths: Iterable[str]) -> bool:
    for public in public_paths:
        if path == public:
            return True
        if public != "/" and path.startswith(public.rstrip("/") + "/"):
            return True
    return False


def resolve_redirect(
    snapshot: SessionSnapshot,
    current_path: str,
    options: RedirectOptions,
) -> Optional[str]:
    """
    Decide where to redirect, if anywhere.

    Args:
        snapshot: Current session state
        current_path: Path plus query string of the current location
        options: Guard behaviour

    Returns:
        The target path, or None to stay put
    """
    if not snapshot.is_ready:
        return None

    if snapshot.is_authenticated and snapshot.user is not None:
        if not options.redirect_on_login:
            return None
        target = role_landing_path(snapshot.user.role)
        return None if current_path == target else target

    if not snapshot.is_authenticated and snapshot.user is None and options.redirect_on_logout:
        path = urlsplit(current_path).path or "/"
        if path == options.logout_redirect_path:
            return None
        if is_public_path(path, options.public_paths) or is_auth_path(path):
            return None
        return options.logout_redirect_path

    return None
