"""
Session module interfaces.

Components depend on ISessionService rather than a global store; the
service is constructed once per tab and passed to whoever needs it.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from shared.models import User

from .models import BroadcastKind, BroadcastMessage, SessionSnapshot

SessionListener = Callable[[SessionSnapshot], None]


@runtime_checkable
class IBroadcastChannel(Protocol):
    """
    Publish/subscribe channel between tabs.

    Messages reach every other tab's channel, never the publisher's own.
    """

    def publish(self, kind: BroadcastKind) -> Optional[BroadcastMessage]:
        ...

    def subscribe(self, listener: Callable[[BroadcastMessage], None]) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class ISessionService(Protocol):
    """Interface of the per-tab session store."""

    @property
    def snapshot(self) -> SessionSnapshot:
        """Current state of the store."""
        ...

    async def fetch_profile(self) -> Optional[User]:
        """Fetch the profile without changing the store."""
        ...

    def login(self, user_data: Any) -> User:
        """
        Adopt a freshly authenticated user and notify other tabs.

        Raises:
            InvalidUserPayloadError: If the payload lacks an email or role
        """
        ...

    async def logout(self) -> None:
        """End the session; local state is cleared even if the request fails."""
        ...

    async def refresh(self) -> Optional[User]:
        """Re-fetch the profile unless a fetch is already in flight."""
        ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a callable that unregisters it."""
        ...
