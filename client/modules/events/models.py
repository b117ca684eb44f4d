"""
Events module data models.

Mirrors the payloads of the event, ticket type, category and draft
endpoints. Unknown fields are kept so callers see the full server record.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field

from shared.models import Pagination


class Event(BaseModel):
    """An event as listed or shown by the backend."""

    id: int = Field(..., description="Event ID")
    name: str = Field(..., description="Event name")
    description: Optional[str] = None
    date: Optional[str] = None
    end_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None
    status: Optional[str] = None
    likes_count: int = 0
    organizer_id: Optional[int] = None

    model_config = {"extra": "allow"}


class EventPage(BaseModel):
    """One page of events."""

    events: list[Event] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class TicketType(BaseModel):
    id: int
    type_name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    event_id: Optional[int] = None

    model_config = {"extra": "allow"}


class Category(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    model_config = {"extra": "allow"}


class EventCreate(BaseModel):
    """Form fields of the create-event dialog (sent as multipart form data)."""

    name: str = Field(..., min_length=1)
    description: str = ""
    date: str = Field(..., description="Start date, YYYY-MM-DD")
    end_date: Optional[str] = Field(None, description="End date, YYYY-MM-DD")
    start_time: str = Field(..., description="Start time, HH:MM")
    end_time: Optional[str] = Field(None, description="End time, HH:MM")
    location: str = Field(..., min_length=1)
    category_id: Optional[int] = None
    organizer_id: Optional[int] = None

    def to_form(self) -> dict[str, str]:
        """Form fields; blank values and an end date equal to the start date are left out."""
        form = {
            key: str(value)
            for key, value in self.model_dump(exclude_none=True).items()
            if value != ""
        }
        if form.get("end_date") == form.get("date"):
            form.pop("end_date", None)
        return form


class Draft(BaseModel):
    """
    Server-owned provisional event.

    The client reads it and sends field-level patches; it never computes
    the draft's contents itself.
    """

    id: str = Field(..., description="Opaque draft ID")
    fields: dict[str, Any] = Field(default_factory=dict)
    status: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"extra": "allow"}
