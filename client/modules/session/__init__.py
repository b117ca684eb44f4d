"""
Session module.

Per-tab session store with cross-tab and in-tab synchronization.

Public API:
- ISessionService: Interface of the session store
- SessionService: The store (constructed once per tab)
- BroadcastHub / BroadcastChannel: Cross-tab publish/subscribe
- EventBus: In-tab auth-state-changed dispatcher
- Models: SessionSnapshot, SessionState, AuthStateChanged, AuthAction
"""

from .interfaces import IBroadcastChannel, ISessionService
from .models import (
    SessionState,
    SessionSnapshot,
    BroadcastKind,
    BroadcastMessage,
    AuthAction,
    AuthStateChanged,
)
from .broadcast import BroadcastChannel, BroadcastHub
from .events import EventBus
from .service import SessionService

__all__ = [
    # Interfaces
    "IBroadcastChannel",
    "ISessionService",
    # Models
    "SessionState",
    "SessionSnapshot",
    "BroadcastKind",
    "BroadcastMessage",
    "AuthAction",
    "AuthStateChanged",
    # Implementations
    "BroadcastChannel",
    "BroadcastHub",
    "EventBus",
    "SessionService",
]
