"""Domain errors for the registrations module."""

from core.errors import DomainError, ErrorCode


class RegistrationNotFoundError(DomainError):
    """Raised when a registration is not found."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="Registration not found",
        )
        self.registration_id = registration_id


class InvalidRegistrationIdError(DomainError):
    """Raised when a registration ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_REGISTRATION_ID,
            message="Invalid registration ID format",
        )


class DuplicateRegistrationError(DomainError):
    """Raised when the party already holds an active registration for the event."""

    def __init__(self, event_id: str, party_key: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_REGISTRATION,
            message="Already registered for this event",
        )
        self.event_id = event_id
        self.party_key = party_key


class CapacityExceededError(DomainError):
    """Raised when the event is full and no last-minute pass applies."""

    def __init__(self, event_id: str, capacity: int, pass_allowed: bool = True) -> None:
        hint = (
            " Retry with a last-minute pass to register at the increased fee."
            if pass_allowed
            else ""
        )
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Event is full ({capacity} registrations).{hint}",
        )
        self.event_id = event_id
        self.capacity = capacity


class InvalidPartyError(DomainError):
    """Raised when party details are unusable, e.g. a blank team name."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PARTY, message=message)


class InvalidPartySizeError(DomainError):
    """Raised when a team's size is out of range or does not match its roster."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PARTY_SIZE, message=message)


class MissingPaymentProofError(DomainError):
    """Raised when a team registration arrives without payment proof."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MISSING_PAYMENT_PROOF,
            message="Payment proof is required for team registrations",
        )


class InvalidStatusTransitionError(DomainError):
    """Raised when a payment status change is not allowed."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_STATUS_TRANSITION, message=reason)


class RegistrationCancelledError(DomainError):
    """Raised when editing or checking in a cancelled registration."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CANCELLED,
            message="Registration has been cancelled",
        )
        self.registration_id = registration_id


class AlreadyCheckedInError(DomainError):
    """Raised when a ticket is scanned a second time."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CHECKED_IN,
            message="Ticket has already been checked in",
        )
        self.registration_id = registration_id
