"""
Events module interface.

Dashboards and the event-creation assistant depend on IEventsService; the
backend owns all event, ticket and draft state.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import Category, Draft, Event, EventCreate, EventPage, TicketType


@runtime_checkable
class IEventsService(Protocol):

    async def list_events(
        self, page: int = 1, per_page: int = 20, search: Optional[str] = None
    ) -> EventPage:
        ...

    async def get_event(self, event_id: int) -> Event:
        """
        Raises:
            EventNotFoundError: If the event does not exist
        """
        ...

    async def get_ticket_types(self, event_id: int) -> list[TicketType]:
        ...

    async def like_event(self, event_id: int) -> None:
        ...

    async def create_event(
        self, event: EventCreate, image: Optional[tuple[str, bytes, str]] = None
    ) -> Event:
        """
        Create an event.

        Args:
            event: Form fields
            image: Optional (filename, content, content_type) upload
        """
        ...

    async def create_draft(self, fields: Optional[dict[str, Any]] = None) -> Draft:
        ...

    async def get_draft(self, draft_id: str) -> Draft:
        ...

    async def update_draft(self, draft_id: str, patch: dict[str, Any]) -> Draft:
        """
        Send a field-level patch.

        Raises:
            EmptyDraftPatchError: If the patch is empty
        """
        ...

    async def list_categories(self) -> list[Category]:
        ...

    async def list_cities(self) -> list[str]:
        ...

    async def list_ticket_types(self) -> list[TicketType]:
        ...
