"""
Events module.

Client for the event, ticket type, category, city and draft endpoints used
by the dashboards and the event-creation assistant.

Public API:
- IEventsService: Interface for event operations
- Models: Event, EventPage, TicketType, Category, EventCreate, Draft
- Exceptions: EventNotFoundError, DraftNotFoundError, EmptyDraftPatchError
"""

from .interfaces import IEventsService
from .models import Category, Draft, Event, EventCreate, EventPage, TicketType
from .exceptions import DraftNotFoundError, EmptyDraftPatchError, EventNotFoundError

__all__ = [
    # Interface
    "IEventsService",
    # Models
    "Category",
    "Draft",
    "Event",
    "EventCreate",
    "EventPage",
    "TicketType",
    # Exceptions
    "DraftNotFoundError",
    "EmptyDraftPatchError",
    "EventNotFoundError",
]
