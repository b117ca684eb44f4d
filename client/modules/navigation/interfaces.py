"""
Navigation module interface.

The redirect guards only need to read the current location and move to a
new one; INavigator is that seam (a router in a UI, a recorder in tests).
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class INavigator(Protocol):

    @property
    def current_path(self) -> str:
        """Current path including the query string, e.g. /dashboard?tab=admin."""
        ...

    def navigate(self, path: str, replace: bool = False) -> None:
        """Move to `path`; `replace` overwrites the current history entry."""
        ...
