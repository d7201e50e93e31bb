"""Event service - all catalog business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import uuid
from dataclasses import asdict, dataclass, fields as dataclass_fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from accounts.principal import Principal
from core.clock import Clock, now
from core.errors import ForbiddenError
from events.domain.errors import EventNotFoundError, InvalidEventError, InvalidEventIdError
from events.domain.models import Event
from events.domain.value_objects import Capacity, EventId, FeeMultiplier, Money
from events.stores.interfaces import EventStore

logger = logging.getLogger("turnstile.events")


@dataclass(frozen=True)
class EventDraft:
    """Organizer-supplied event fields, not yet validated."""

    title: str
    description: str
    date: datetime
    base_fee: Decimal
    capacity: int
    last_minute_fee_multiplier: Decimal = FeeMultiplier.DEFAULT
    last_minute_pass_allowed: bool = True
    time: str = ""
    location: str = ""
    image_url: str = ""


EDITABLE_FIELDS = frozenset(field.name for field in dataclass_fields(EventDraft))


def can_manage_event(event: Event, principal: Principal) -> bool:
    """Owners and admins manage an event and its registrations."""
    return principal.is_admin or event.is_owned_by(principal.id)


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidEventIdError() from exc


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: EventStore, clock: Clock = now) -> None:
        self._store = store
        self._clock = clock

    def list_events(self) -> list[Event]:
        """Return all events."""
        return self._store.list_events()

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_event_id(event_id)
        event = self._store.get_event(parsed)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def create_event(self, principal: Principal, draft: EventDraft) -> Event:
        """Publish a new event owned by the principal.

        Raises:
            InvalidEventError: If capacity, fee or multiplier break an invariant.
        """
        stamp = self._clock()
        event = self._build(
            draft,
            event_id=EventId(value=uuid.uuid4()),
            created_by=principal.id,
            created_at=stamp,
            updated_at=stamp,
        )
        created = self._store.create_event(event)
        logger.info("Event created: event=%s, owner=%s", created.id, principal.id)
        return created

    def update_event(self, event_id: str, principal: Principal, changes: dict[str, Any]) -> Event:
        """Apply a partial update to an event.

        Raises:
            InvalidEventIdError, EventNotFoundError: As for get_event.
            ForbiddenError: If the principal is neither the owner nor an admin.
            InvalidEventError: If the merged fields break an invariant.
        """
        current = self.get_event(event_id)
        self._ensure_can_manage(current, principal)

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidEventError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        draft = replace(self._draft_of(current), **changes)
        updated = self._build(
            draft,
            event_id=current.id,
            created_by=current.created_by,
            created_at=current.created_at,
            updated_at=self._clock(),
        )
        saved = self._store.update_event(updated)
        logger.info(
            "Event updated: event=%s, actor=%s, fields=%s",
            saved.id,
            principal.id,
            sorted(changes),
        )
        return saved

    def delete_event(self, event_id: str, principal: Principal) -> None:
        """Remove an event and, through cascade, its registrations."""
        current = self.get_event(event_id)
        self._ensure_can_manage(current, principal)
        if not self._store.delete_event(current.id):
            raise EventNotFoundError(str(event_id))
        logger.info("Event deleted: event=%s, actor=%s", current.id, principal.id)

    def _ensure_can_manage(self, event: Event, principal: Principal) -> None:
        if not can_manage_event(event, principal):
            logger.warning(
                "Event management denied: event=%s, actor=%s", event.id, principal.id
            )
            raise ForbiddenError("Not authorized to manage this event")

    @staticmethod
    def _draft_of(event: Event) -> EventDraft:
        return EventDraft(
            title=event.title,
            description=event.description,
            date=event.date,
            base_fee=event.base_fee.amount,
            capacity=event.capacity.value,
            last_minute_fee_multiplier=event.last_minute_fee_multiplier.value,
            last_minute_pass_allowed=event.last_minute_pass_allowed,
            time=event.time,
            location=event.location,
            image_url=event.image_url,
        )

    @staticmethod
    def _build(
        draft: EventDraft,
        *,
        event_id: EventId,
        created_by: str,
        created_at: datetime,
        updated_at: datetime,
    ) -> Event:
        fields = asdict(draft)
        if not str(fields["title"]).strip():
            raise InvalidEventError("Event title is required")
        try:
            base_fee = Money(amount=Decimal(str(fields.pop("base_fee"))))
            capacity = Capacity(value=int(fields.pop("capacity")))
            multiplier = FeeMultiplier(value=Decimal(str(fields.pop("last_minute_fee_multiplier"))))
        except (ValueError, ArithmeticError) as exc:
            raise InvalidEventError(str(exc)) from exc

        return Event(
            id=event_id,
            base_fee=base_fee.rounded(),
            capacity=capacity,
            last_minute_fee_multiplier=multiplier,
            created_by=created_by,
            created_at=created_at,
            updated_at=updated_at,
            **fields,
        )
