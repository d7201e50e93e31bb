"""Domain errors for the events module."""

from core.errors import DomainError, ErrorCode


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class InvalidEventError(DomainError):
    """Raised when event fields break a catalog invariant."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_EVENT, message=message)


class EventClosedError(DomainError):
    """Raised when acting on registrations of an event whose date has passed."""

    def __init__(self, event_id: str, action: str = "register for") -> None:
        super().__init__(
            code=ErrorCode.EVENT_CLOSED,
            message=f"Cannot {action} a past event",
        )
        self.event_id = event_id
