"""In-tab dispatcher for auth-state-changed events."""

import logging
from typing import Callable

from .models import AuthStateChanged

logger = logging.getLogger(__name__)

AuthStateListener = Callable[[AuthStateChanged], None]


class EventBus:
    """Synchronous publish/subscribe within one tab."""

    def __init__(self):
        self._listeners: list[AuthStateListener] = []

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: AuthStateChanged) -> None:
        logger.debug(f"auth-state-changed: {event.action.value} from {event.source}")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"auth-state-changed listener failed on {event.action.value}")
