"""
Events service implementation.

Thin client over the event, ticket type, category, city and draft
endpoints. Responses are accepted in both shapes the backend uses: a bare
list, or an object wrapping the list under a named key.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from shared.http import ApiClient, get_api_client, json_body, parse_body, raise_for_api_error
from shared.models import Pagination

from .interfaces import IEventsService
from .models import Category, Draft, Event, EventCreate, EventPage, TicketType
from .exceptions import DraftNotFoundError, EmptyDraftPatchError, EventNotFoundError

logger = logging.getLogger(__name__)


def _unwrap_list(body: Any, key: str) -> list:
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get(key), list):
        return body[key]
    return []


def _unwrap_object(body: Any, key: str) -> dict:
    if isinstance(body, dict) and isinstance(body.get(key), dict):
        return body[key]
    return body if isinstance(body, dict) else {}


def _to_draft(response: httpx.Response) -> Draft:
    data = dict(_unwrap_object(json_body(response), "draft"))
    if data.get("id") is not None:
        data["id"] = str(data["id"])
    return parse_body(Draft, data, response, "draft")


def filter_events(events: list[Event], query: str) -> list[Event]:
    """Case-insensitive match on name, description or location."""
    needle = query.strip().lower()
    if not needle:
        return list(events)
    return [
        event
        for event in events
        if any(
            needle in (value or "").lower()
            for value in (event.name, event.description, event.location)
        )
    ]


class EventsService(IEventsService):
    """Implementation of the events API client."""

    def __init__(self, api: Optional[ApiClient] = None):
        self._api = api or get_api_client()

    async def list_events(
        self, page: int = 1, per_page: int = 20, search: Optional[str] = None
    ) -> EventPage:
        params: dict[str, Any] = {"page": page, "per_page": per_page}
        if search:
            params["search"] = search

        response = await self._api.get("/events", params=params)
        raise_for_api_error(response, "Failed to fetch events")
        body = json_body(response)

        events = [
            parse_body(Event, item, response, "event")
            for item in _unwrap_list(body, "events")
        ]
        if isinstance(body, dict) and isinstance(body.get("pagination"), dict):
            pagination = parse_body(Pagination, body["pagination"], response, "pagination")
        else:
            # Unpaginated list: the server may not have applied the search
            if search:
                events = filter_events(events, search)
            pagination = Pagination(
                total=len(events),
                pages=1,
                current_page=page,
                per_page=per_page,
            )
        return EventPage(events=events, pagination=pagination)

    async def get_event(self, event_id: int) -> Event:
        response = await self._api.get(f"/events/{event_id}")
        if response.status_code == 404:
            raise EventNotFoundError(event_id)
        raise_for_api_error(response, "Failed to fetch event")
        return parse_body(
            Event, _unwrap_object(json_body(response), "event"), response, "event"
        )

    async def get_ticket_types(self, event_id: int) -> list[TicketType]:
        response = await self._api.get(f"/events/{event_id}/ticket-types")
        if response.status_code == 404:
            raise EventNotFoundError(event_id)
        raise_for_api_error(response, "Failed to fetch ticket types")
        return [
            parse_body(TicketType, item, response, "ticket type")
            for item in _unwrap_list(json_body(response), "ticket_types")
        ]

    async def like_event(self, event_id: int) -> None:
        response = await self._api.post(f"/events/{event_id}/like")
        if response.status_code == 404:
            raise EventNotFoundError(event_id)
        raise_for_api_error(response, "Failed to like event")

    async def create_event(
        self, event: EventCreate, image: Optional[tuple[str, bytes, str]] = None
    ) -> Event:
        files = {"file": image} if image else None
        response = await self._api.post("/events", data=event.to_form(), files=files)
        raise_for_api_error(response, "Failed to create event")
        created = parse_body(
            Event, _unwrap_object(json_body(response), "event"), response, "event"
        )
        logger.info(f"Created event {created.id}: {created.name}")
        return created

    async def create_draft(self, fields: Optional[dict[str, Any]] = None) -> Draft:
        response = await self._api.post("/events/drafts", json=fields or {})
        raise_for_api_error(response, "Failed to create draft")
        return _to_draft(response)

    async def get_draft(self, draft_id: str) -> Draft:
        response = await self._api.get(f"/events/drafts/{quote(draft_id, safe='')}")
        if response.status_code == 404:
            raise DraftNotFoundError(draft_id)
        raise_for_api_error(response, "Failed to fetch draft")
        return _to_draft(response)

    async def update_draft(self, draft_id: str, patch: dict[str, Any]) -> Draft:
        if not patch:
            raise EmptyDraftPatchError()
        response = await self._api.patch(
            f"/events/drafts/{quote(draft_id, safe='')}", json=patch
        )
        if response.status_code == 404:
            raise DraftNotFoundError(draft_id)
        raise_for_api_error(response, "Failed to update draft")
        return _to_draft(response)

    async def list_categories(self) -> list[Category]:
        response = await self._api.get("/categories")
        raise_for_api_error(response, "Failed to fetch categories")
        return [
            parse_body(Category, item, response, "category")
            for item in _unwrap_list(json_body(response), "categories")
        ]

    async def list_cities(self) -> list[str]:
        response = await self._api.get("/cities")
        raise_for_api_error(response, "Failed to fetch cities")
        cities = []
        for item in _unwrap_list(json_body(response), "cities"):
            name = item.get("name") if isinstance(item, dict) else item
            if name:
                cities.append(str(name))
        return cities

    async def list_ticket_types(self) -> list[TicketType]:
        response = await self._api.get("/ticket-types")
        raise_for_api_error(response, "Failed to fetch ticket types")
        return [
            parse_body(TicketType, item, response, "ticket type")
            for item in _unwrap_list(json_body(response), "ticket_types")
        ]


# Module-level instance getter
_service_instance: Optional[EventsService] = None


def get_events_service() -> EventsService:
    """Get the events service singleton."""
    global _service_instance
    if _service_instance is None:
        _service_instance = EventsService()
    return _service_instance


def reset_events_service() -> None:
    """Reset the events service singleton (for testing)."""
    global _service_instance
    _service_instance = None
