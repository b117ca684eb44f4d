"""
Redirect guards.

AuthRedirectGuard sends users to their role's landing route once the
session is ready, and sends signed-out users away from protected routes.
RoleGuard keeps users off pages their role may not see.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional, Union

from shared.models import UserRole
from shared.scheduling import call_later

from modules.auth.models import parse_role
from modules.session.interfaces import ISessionService
from modules.session.models import SessionSnapshot

from .interfaces import INavigator
from .models import RedirectOptions
from .policy import resolve_redirect, role_landing_path

logger = logging.getLogger(__name__)


class AuthRedirectGuard:
    """
    Reacts to session snapshots with delayed, history-replacing redirects.

    Start it from inside the running event loop; redirects are scheduled
    `redirect_delay` seconds out and a newer redirect replaces a pending one.
    """

    def __init__(
        self,
        session: ISessionService,
        navigator: INavigator,
        options: Optional[RedirectOptions] = None,
    ):
        self._session = session
        self._navigator = navigator
        self._options = options or RedirectOptions.from_settings()
        self._pending: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_redirecting(self) -> bool:
        return not self._session.snapshot.is_ready

    @property
    def can_access(self) -> bool:
        snapshot = self._session.snapshot
        return snapshot.is_authenticated and snapshot.user is not None

    @property
    def user_role(self) -> Optional[UserRole]:
        return self._session.snapshot.role

    @property
    def pending_redirect(self) -> Optional[asyncio.Task]:
        return self._pending

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._session.subscribe(self.evaluate)
        self.evaluate(self._session.snapshot)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel_pending()

    def evaluate(self, snapshot: SessionSnapshot) -> Optional[str]:
        """Schedule a redirect for this snapshot if the policy calls for one."""
        target = resolve_redirect(snapshot, self._navigator.current_path, self._options)
        if target is None:
            return None

        role = snapshot.role.value if snapshot.role else None
        logger.debug(f"Redirecting to {target}" + (f" for {role}" if role else ""))
        if self._options.on_redirect:
            self._options.on_redirect(target, role)

        self._cancel_pending()
        self._pending = call_later(self._options.redirect_delay, self._navigate, target)
        return target

    def _navigate(self, target: str) -> None:
        self._pending = None
        self._navigator.navigate(target, replace=True)

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None


class RoleGuard:
    """Redirects an authenticated user whose role is not allowed on this page."""

    def __init__(
        self,
        session: ISessionService,
        navigator: INavigator,
        allowed_roles: Iterable[Union[UserRole, str]],
    ):
        self._session = session
        self._navigator = navigator
        self._allowed = {role for role in map(parse_role, allowed_roles) if role is not None}
        self._unsubscribe: Optional[Callable[[], None]] = None

    def has_access(self) -> bool:
        snapshot = self._session.snapshot
        if not snapshot.is_authenticated or snapshot.user is None:
            return False
        return snapshot.user.role in self._allowed

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._session.subscribe(self.check)
        self.check(self._session.snapshot)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def check(self, snapshot: SessionSnapshot) -> Optional[str]:
        if not snapshot.is_ready or not snapshot.is_authenticated or snapshot.user is None:
            return None
        if snapshot.user.role in self._allowed:
            return None

        target = role_landing_path(snapshot.user.role)
        allowed = ", ".join(sorted(role.value for role in self._allowed))
        logger.warning(f"Access denied for {snapshot.user.role.value}, allowed: {allowed}")
        self._navigator.navigate(target, replace=True)
        return target
