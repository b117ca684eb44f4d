"""
Events module exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class EventNotFoundError(NotFoundError):
    """Raised when an event does not exist."""

    def __init__(self, event_id: int):
        super().__init__(
            f"Event not found: {event_id}",
            code="EVENT_NOT_FOUND",
            details={"event_id": event_id},
        )


class DraftNotFoundError(NotFoundError):
    """Raised when a draft does not exist or belongs to someone else."""

    def __init__(self, draft_id: str):
        super().__init__(
            f"Draft not found: {draft_id}",
            code="DRAFT_NOT_FOUND",
            details={"draft_id": draft_id},
        )


class EmptyDraftPatchError(ValidationError):
    """Raised when a draft update carries no fields."""

    def __init__(self):
        super().__init__("Draft update has no fields", code="EMPTY_DRAFT_PATCH")
