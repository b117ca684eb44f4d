"""
In-process broadcast channel between tabs.

Each tab holds one BroadcastChannel endpoint on a shared BroadcastHub.
A published message reaches every other open endpoint, never the sender,
on the next event-loop iteration.
"""

import asyncio
import logging
import uuid
from typing import Callable, Optional

from .models import BroadcastKind, BroadcastMessage

logger = logging.getLogger(__name__)

BroadcastListener = Callable[[BroadcastMessage], None]


class BroadcastChannel:
    """One tab's endpoint on a BroadcastHub."""

    def __init__(self, hub: "BroadcastHub", channel_id: str):
        self.id = channel_id
        self._hub = hub
        self._listeners: list[BroadcastListener] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, kind: BroadcastKind) -> Optional[BroadcastMessage]:
        """Publish a message to the other tabs."""
        if self._closed:
            logger.debug(f"Channel {self.id} is closed, dropping {kind.value}")
            return None
        message = BroadcastMessage(kind=kind, sender=self.id)
        self._hub.deliver(message)
        return message

    def subscribe(self, listener: BroadcastListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        self._closed = True
        self._listeners.clear()
        self._hub.detach(self.id)

    def receive(self, message: BroadcastMessage) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception(f"Broadcast listener failed on {message.kind.value}")


class BroadcastHub:
    """Connects the channels of all tabs in this process."""

    def __init__(self):
        self._channels: dict[str, BroadcastChannel] = {}

    def channel(self, channel_id: Optional[str] = None) -> BroadcastChannel:
        """Open a new endpoint (one per tab)."""
        channel_id = channel_id or uuid.uuid4().hex
        endpoint = BroadcastChannel(self, channel_id)
        self._channels[channel_id] = endpoint
        return endpoint

    def detach(self, channel_id: str) -> None:
        self._channels.pop(channel_id, None)

    def deliver(self, message: BroadcastMessage) -> None:
        targets = [
            endpoint
            for channel_id, endpoint in self._channels.items()
            if channel_id != message.sender
        ]
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for endpoint in targets:
            if loop is not None:
                loop.call_soon(endpoint.receive, message)
            else:
                endpoint.receive(message)
