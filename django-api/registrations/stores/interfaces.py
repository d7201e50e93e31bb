"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from events.domain import EventId
from registrations.domain import PaymentStatus, Registration, RegistrationId


class RegistrationLedger(ABC):
    """Authoritative set of registration records per event.

    Implementations must enforce "one active registration per
    (event_id, party_key)" atomically in insert(), not only via a prior read.
    """

    @abstractmethod
    def count_active(self, event_id: EventId) -> int:
        """Count non-cancelled registrations for an event."""
        ...

    @abstractmethod
    def find_by_party_key(self, event_id: EventId, party_key: str) -> Registration | None:
        """Return the active registration holding party_key, or None."""
        ...

    @abstractmethod
    def insert(self, registration: Registration) -> Registration:
        """Persist a new registration.

        Raises:
            ConflictError: If an active registration with the same party key exists.
        """
        ...

    @abstractmethod
    def update_status(
        self,
        registration_id: RegistrationId,
        expected: PaymentStatus,
        new_status: PaymentStatus,
    ) -> Registration:
        """Move the payment status from expected to new_status.

        The write applies only while the stored status still equals expected.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
            InvalidStatusTransitionError: If the stored status is no longer expected.
        """
        ...

    @abstractmethod
    def get(self, registration_id: RegistrationId) -> Registration | None:
        """Return a registration by ID, or None if not found."""
        ...

    @abstractmethod
    def get_by_ticket_code(self, ticket_code: str) -> Registration | None:
        """Return the registration holding a ticket code, or None."""
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Registration]:
        """Return all registrations for an event, newest first."""
        ...

    @abstractmethod
    def list_for_registrant(self, registrant_id: str) -> list[Registration]:
        """Return all registrations submitted by a principal, newest first."""
        ...

    @abstractmethod
    def find_for_registrant(self, event_id: EventId, registrant_id: str) -> Registration | None:
        """Return the principal's most recent registration for an event, or None."""
        ...

    @abstractmethod
    def update_details(self, registration_id: RegistrationId, changes: dict) -> Registration:
        """Overwrite mutable display fields.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
        """
        ...

    @abstractmethod
    def mark_checked_in(self, registration_id: RegistrationId, when: datetime) -> Registration:
        """Record the check-in time.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
        """
        ...

    @abstractmethod
    def delete(self, registration_id: RegistrationId) -> bool:
        """Hard-delete a registration. Return False if it did not exist."""
        ...
