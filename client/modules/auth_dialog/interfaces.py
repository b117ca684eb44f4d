"""
Auth dialog collaborator interfaces.

The dialog reports outcomes through an INotifier (the toast) and keeps the
pre-auth return URL in an IKeyValueStorage.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import ToastVariant


@runtime_checkable
class INotifier(Protocol):
    """Shows short user-facing notifications."""

    def notify(
        self,
        title: str,
        description: Optional[str] = None,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> None:
        ...


@runtime_checkable
class IKeyValueStorage(Protocol):
    """Small string key-value store (the browser's localStorage)."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...
