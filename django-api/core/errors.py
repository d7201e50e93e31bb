"""Domain error codes shared by every app.

App-specific errors live in each app's domain/errors.py and subclass
DomainError with one of the codes below.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    INVALID_EVENT = "INVALID_EVENT"
    EVENT_CLOSED = "EVENT_CLOSED"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    INVALID_REGISTRATION_ID = "INVALID_REGISTRATION_ID"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INVALID_PARTY = "INVALID_PARTY"
    INVALID_PARTY_SIZE = "INVALID_PARTY_SIZE"
    MISSING_PAYMENT_PROOF = "MISSING_PAYMENT_PROOF"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    REGISTRATION_CANCELLED = "REGISTRATION_CANCELLED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class UnauthorizedError(DomainError):
    """Raised when an operation needs a principal and none was supplied."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.UNAUTHORIZED,
            message="Authentication required",
        )


class ForbiddenError(DomainError):
    """Raised when the principal may not act on the target resource."""

    def __init__(self, message: str = "Not authorized to perform this action") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class ConflictError(DomainError):
    """Raised by stores when a storage-level unique constraint rejects a write."""

    def __init__(self, message: str = "Conflicting record already exists") -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message)
