"""
Session store implementation.

Holds the current user for one tab, reconstructed from the server on every
start, and keeps it in step with the other tabs and with components of the
same tab.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from shared.config import SessionTimings, get_settings
from shared.exceptions import PulseError
from shared.models import User
from shared.scheduling import Debouncer, call_later

from modules.auth.interfaces import IAuthApi
from modules.auth.models import normalize_user, require_user

from .events import EventBus
from .interfaces import IBroadcastChannel, ISessionService, SessionListener
from .models import (
    AuthAction,
    AuthStateChanged,
    BroadcastKind,
    BroadcastMessage,
    SessionSnapshot,
    SessionState,
)

logger = logging.getLogger(__name__)

# Source tag on events dispatched by the store itself
SESSION_SOURCE = "session"


class SessionService(ISessionService):
    """
    Per-tab session store.

    Lifecycle: UNINITIALIZED -> LOADING -> READY. initialize() runs once and
    always settles into READY, authenticated or not.

    Cross-tab sync (debounced): auth-logout from another tab clears the
    session without a request; auth-login triggers a profile refresh after
    a short grace delay.
    """

    def __init__(
        self,
        auth_api: IAuthApi,
        channel: IBroadcastChannel,
        event_bus: Optional[EventBus] = None,
        timings: Optional[SessionTimings] = None,
    ):
        self._auth = auth_api
        self._channel = channel
        self._event_bus = event_bus or EventBus()
        self._timings = timings or get_settings().timings()

        self._snapshot = SessionSnapshot()
        self._initialized = False
        self._initializing = False
        # Bumped on every login and clear; fetches started under an older
        # generation must not overwrite the session
        self._generation = 0
        self._listeners: list[SessionListener] = []
        self._unsubscribers: list[Callable[[], None]] = []

        self._broadcast_debouncer = Debouncer(
            self._timings.storage_debounce, self._handle_broadcast
        )
        self._event_debouncer = Debouncer(
            self._timings.state_event_debounce, self._handle_auth_event
        )
        self._login_sync_task: Optional[asyncio.Task] = None

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def user(self) -> Optional[User]:
        return self._snapshot.user

    @property
    def is_authenticated(self) -> bool:
        return self._snapshot.is_authenticated

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    @property
    def state(self) -> SessionState:
        return self._snapshot.state

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Attach the cross-tab and in-tab listeners."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self._channel.subscribe(self._on_broadcast),
            self._event_bus.subscribe(self._on_auth_event),
        ]

    def close(self) -> None:
        """Detach listeners and drop pending timers."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._broadcast_debouncer.close()
        self._event_debouncer.close()
        self._cancel_login_sync()

    async def __aenter__(self) -> "SessionService":
        self.start()
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    async def initialize(self) -> SessionSnapshot:
        """
        Load the session from the server.

        Runs at most once; later calls return the current snapshot.
        """
        if self._initialized or self._initializing:
            return self._snapshot

        self._initializing = True
        self._update(state=SessionState.LOADING, loading=True)
        generation = self._generation
        user: Optional[User] = None
        try:
            user = await self._auth.fetch_profile()
        finally:
            self._initialized = True
            self._initializing = False
            if generation == self._generation:
                self._update(
                    state=SessionState.READY,
                    loading=False,
                    user=user,
                    is_authenticated=user is not None,
                )
            else:
                logger.debug("Session changed during initial fetch, keeping the newer state")
        logger.debug(f"Session initialized, authenticated={self.is_authenticated}")
        return self._snapshot

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def fetch_profile(self) -> Optional[User]:
        return await self._auth.fetch_profile()

    def login_user(self, user_data: Any) -> User:
        """
        Adopt an authenticated user and tell the other tabs.

        Raises:
            InvalidUserPayloadError: If the payload lacks an email or role;
                the store is left unchanged
        """
        user = user_data if isinstance(user_data, User) else require_user(user_data)
        self._generation += 1
        self._initialized = True
        self._update(
            state=SessionState.READY,
            loading=False,
            user=user,
            is_authenticated=True,
        )
        self._channel.publish(BroadcastKind.LOGIN)
        logger.info(f"Logged in as {user.email} ({user.role.value})")
        return user

    async def logout_user(self) -> None:
        """
        Log out on the server (best effort) and clear the session.

        The local session is cleared even when the request fails or times out.
        """
        try:
            await self._auth.logout()
        except PulseError as e:
            logger.warning(f"Logout request failed, clearing local session anyway: {e.message}")
        finally:
            self._cancel_login_sync()
            self._event_debouncer.close()
            self._clear()
            self._channel.publish(BroadcastKind.LOGOUT)
            self._event_bus.dispatch(
                AuthStateChanged(action=AuthAction.LOGOUT, source=SESSION_SOURCE)
            )
            logger.info("Logged out")

    async def refresh_user(self) -> Optional[User]:
        """Re-fetch the profile unless a fetch is already in flight."""
        if self._auth.profile_fetch_in_flight:
            logger.debug("Profile fetch already in flight, refresh skipped")
            return self._snapshot.user

        generation = self._generation
        user = await self._auth.fetch_profile()
        if generation != self._generation:
            logger.debug("Session changed while refreshing, discarding the stale profile")
            return self._snapshot.user

        self._initialized = True
        self._update(
            state=SessionState.READY,
            loading=False,
            user=user,
            is_authenticated=user is not None,
        )
        return user

    login = login_user
    logout = logout_user
    refresh = refresh_user

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Cross-tab and in-tab sync
    # -------------------------------------------------------------------------

    def _on_broadcast(self, message: BroadcastMessage) -> None:
        self._broadcast_debouncer.trigger(message)

    def _handle_broadcast(self, message: BroadcastMessage) -> None:
        if message.kind == BroadcastKind.LOGOUT:
            logger.info("Logout detected in another tab, clearing session")
            self._cancel_login_sync()
            self._clear()
        elif message.kind == BroadcastKind.LOGIN:
            logger.debug("Login detected in another tab, scheduling profile refresh")
            self._cancel_login_sync()
            self._login_sync_task = call_later(
                self._timings.login_sync_delay, self._sync_login
            )

    async def _sync_login(self) -> None:
        if self._auth.profile_fetch_in_flight:
            logger.debug("Profile fetch already in flight, cross-tab login sync skipped")
            return
        await self.refresh_user()

    def _on_auth_event(self, event: AuthStateChanged) -> None:
        if event.source == SESSION_SOURCE:
            return
        self._event_debouncer.trigger(event)

    async def _handle_auth_event(self, event: AuthStateChanged) -> None:
        if event.action == AuthAction.LOGOUT:
            self._clear()
        elif event.action == AuthAction.LOGIN:
            user = normalize_user(event.user) if event.user is not None else None
            if user is None:
                await self.refresh_user()
            elif user != self._snapshot.user:
                self._generation += 1
                self._update(
                    state=SessionState.READY,
                    loading=False,
                    user=user,
                    is_authenticated=True,
                )
        elif event.action == AuthAction.REFRESH:
            await self.refresh_user()

    def _cancel_login_sync(self) -> None:
        if self._login_sync_task is not None and not self._login_sync_task.done():
            self._login_sync_task.cancel()
        self._login_sync_task = None

    # -------------------------------------------------------------------------
    # State updates
    # -------------------------------------------------------------------------

    def _clear(self) -> None:
        self._generation += 1
        self._initialized = True
        self._update(
            state=SessionState.READY,
            loading=False,
            user=None,
            is_authenticated=False,
        )

    def _update(self, **changes: Any) -> None:
        self._snapshot = self._snapshot.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._snapshot)
            except Exception:
                logger.exception("Session listener failed")
