"""
Session module data models.

Snapshots of the session store plus the messages exchanged between tabs
and between components of the same tab.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import User, UserRole


class SessionState(str, Enum):
    """Lifecycle of the session store within one page load."""

    UNINITIALIZED = "uninitialized"  # Nothing fetched yet
    LOADING = "loading"              # Initial profile fetch running
    READY = "ready"                  # Settled into a definite state


class SessionSnapshot(BaseModel):
    """Immutable view of the session store at one point in time."""

    state: SessionState = SessionState.UNINITIALIZED
    user: Optional[User] = None
    is_authenticated: bool = False
    loading: bool = True

    model_config = {"frozen": True}

    @property
    def is_ready(self) -> bool:
        return self.state == SessionState.READY and not self.loading

    @property
    def role(self) -> Optional[UserRole]:
        return self.user.role if self.user else None


class BroadcastKind(str, Enum):
    """Cross-tab message kinds (the original storage marker keys)."""

    LOGIN = "auth-login"
    LOGOUT = "auth-logout"


class BroadcastMessage(BaseModel):
    """A message published to the other tabs."""

    kind: BroadcastKind
    sender: str = Field(..., description="ID of the publishing channel")
    sent_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class AuthAction(str, Enum):
    """Actions carried by auth-state-changed events."""

    LOGIN = "login"
    LOGOUT = "logout"
    REFRESH = "refresh"


class AuthStateChanged(BaseModel):
    """
    In-tab auth-state-changed event.

    `user` is the raw user payload for login events, when the dispatcher has one.
    """

    action: AuthAction
    user: Optional[dict] = None
    source: Optional[str] = Field(None, description="Component that dispatched the event")

    model_config = {"frozen": True}
