"""Pytest configuration and shared fixtures."""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.principal import Principal
from core.errors import ConflictError
from events.domain import Capacity, Event, EventId, FeeMultiplier, Money
from events.stores.interfaces import EventStore
from registrations.domain import PaymentStatus, Registration, RegistrationId
from registrations.domain.errors import InvalidStatusTransitionError, RegistrationNotFoundError
from registrations.stores.interfaces import RegistrationLedger

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class InMemoryEventStore(EventStore):
    def __init__(self) -> None:
        self.events: dict[EventId, Event] = {}

    def list_events(self) -> list[Event]:
        return sorted(self.events.values(), key=lambda event: event.date)

    def get_event(self, event_id: EventId) -> Event | None:
        return self.events.get(event_id)

    def create_event(self, event: Event) -> Event:
        self.events[event.id] = event
        return event

    def update_event(self, event: Event) -> Event:
        self.events[event.id] = event
        return event

    def delete_event(self, event_id: EventId) -> bool:
        return self.events.pop(event_id, None) is not None


class InMemoryLedger(RegistrationLedger):
    """Ledger whose insert enforces the active-party uniqueness atomically."""

    def __init__(self) -> None:
        self.rows: dict[RegistrationId, Registration] = {}
        self._lock = threading.Lock()

    def _require(self, registration_id: RegistrationId) -> Registration:
        if registration_id not in self.rows:
            raise RegistrationNotFoundError(str(registration_id))
        return self.rows[registration_id]

    def count_active(self, event_id: EventId) -> int:
        return sum(1 for row in self.rows.values() if row.event_id == event_id and row.is_active)

    def find_by_party_key(self, event_id: EventId, party_key: str) -> Registration | None:
        for row in self.rows.values():
            if row.event_id == event_id and row.party_key == party_key and row.is_active:
                return row
        return None

    def insert(self, registration: Registration) -> Registration:
        with self._lock:
            for row in self.rows.values():
                if (
                    row.event_id == registration.event_id
                    and row.party_key == registration.party_key
                    and row.is_active
                ):
                    raise ConflictError()
            self.rows[registration.id] = registration
        return registration

    def update_status(
        self,
        registration_id: RegistrationId,
        expected: PaymentStatus,
        new_status: PaymentStatus,
    ) -> Registration:
        with self._lock:
            current = self._require(registration_id)
            if current.payment_status is not expected:
                raise InvalidStatusTransitionError(
                    f"Payment status is '{current.payment_status.value}', expected '{expected.value}'"
                )
            updated = replace(current, payment_status=new_status)
            self.rows[registration_id] = updated
        return updated

    def get(self, registration_id: RegistrationId) -> Registration | None:
        return self.rows.get(registration_id)

    def get_by_ticket_code(self, ticket_code: str) -> Registration | None:
        return next((row for row in self.rows.values() if row.ticket_code == ticket_code), None)

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        rows = [row for row in self.rows.values() if row.event_id == event_id]
        return sorted(rows, key=lambda row: row.registered_at, reverse=True)

    def list_for_registrant(self, registrant_id: str) -> list[Registration]:
        rows = [row for row in self.rows.values() if row.registrant_id == registrant_id]
        return sorted(rows, key=lambda row: row.registered_at, reverse=True)

    def find_for_registrant(self, event_id: EventId, registrant_id: str) -> Registration | None:
        rows = [
            row
            for row in self.list_for_registrant(registrant_id)
            if row.event_id == event_id
        ]
        return rows[0] if rows else None

    def update_details(self, registration_id: RegistrationId, changes: dict) -> Registration:
        updated = replace(self._require(registration_id), **changes)
        self.rows[registration_id] = updated
        return updated

    def mark_checked_in(self, registration_id: RegistrationId, when: datetime) -> Registration:
        updated = replace(self._require(registration_id), checked_in_at=when)
        self.rows[registration_id] = updated
        return updated

    def delete(self, registration_id: RegistrationId) -> bool:
        return self.rows.pop(registration_id, None) is not None


class StaleReadLedger(InMemoryLedger):
    """Simulates a concurrent request that read the ledger before the other insert landed."""

    def find_by_party_key(self, event_id: EventId, party_key: str) -> Registration | None:
        return None


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def catalog() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def stale_ledger() -> StaleReadLedger:
    return StaleReadLedger()


@pytest.fixture
def organizer() -> Principal:
    return Principal(id="1", role="organizer", department="Events", name="Olive Organizer")


@pytest.fixture
def attendee() -> Principal:
    return Principal(
        id="2",
        role="coordinator",
        department="Physics",
        name="Ada Attendee",
        email="ada@example.com",
    )


@pytest.fixture
def other_attendee() -> Principal:
    return Principal(id="3", role="coordinator", department="Chemistry", name="Bo Other")


@pytest.fixture
def admin() -> Principal:
    return Principal(id="99", role="admin", name="Root Admin")


@pytest.fixture
def make_event(catalog, organizer):
    """Create a domain event in the in-memory catalog."""

    def _make(
        capacity: int = 2,
        base_fee: str = "100",
        multiplier: str = "1.75",
        date: datetime | None = None,
        pass_allowed: bool = True,
        owner: Principal | None = None,
    ) -> Event:
        event = Event(
            id=EventId(value=uuid.uuid4()),
            title="Research Symposium",
            description="Annual symposium",
            date=date or NOW + timedelta(days=30),
            time="10:00 AM",
            location="Main Hall",
            base_fee=Money(amount=Decimal(base_fee)),
            capacity=Capacity(value=capacity),
            last_minute_fee_multiplier=FeeMultiplier(value=Decimal(multiplier)),
            last_minute_pass_allowed=pass_allowed,
            image_url="",
            created_by=(owner or organizer).id,
            created_at=NOW - timedelta(days=1),
            updated_at=NOW - timedelta(days=1),
        )
        return catalog.create_event(event)

    return _make


@pytest.fixture
def organizer_user(django_user_model):
    return django_user_model.objects.create_user(
        username="olive",
        password="organizer-pass-1",
        role="organizer",
        first_name="Olive",
        last_name="Organizer",
    )


@pytest.fixture
def attendee_user(django_user_model):
    return django_user_model.objects.create_user(
        username="ada",
        password="attendee-pass-1",
        email="ada@example.com",
        first_name="Ada",
        last_name="Attendee",
        department="Physics",
    )


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="bo", password="other-pass-1")


@pytest.fixture
def admin_user_account(django_user_model):
    return django_user_model.objects.create_user(username="root", password="admin-pass-1", role="admin")


@pytest.fixture
def client_for(api_client):
    """Return an API client authenticated as the given user."""

    def _client(user) -> APIClient:
        api_client.force_authenticate(user=user)
        return api_client

    return _client


@pytest.fixture
def create_event_row(organizer_user):
    """Persist an event row owned by the organizer user."""
    from django.utils import timezone

    from events.models import Event as EventRow

    def _create(**overrides):
        fields = {
            "title": "Research Symposium",
            "description": "Annual symposium",
            "date": timezone.now() + timedelta(days=30),
            "time": "10:00 AM",
            "location": "Main Hall",
            "base_fee": Decimal("100"),
            "capacity": 2,
            "created_by": organizer_user,
        }
        fields.update(overrides)
        return EventRow.objects.create(**fields)

    return _create
