"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from events.domain.value_objects import Capacity, EventId, FeeMultiplier, Money


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    date: datetime
    time: str
    location: str
    base_fee: Money
    capacity: Capacity
    last_minute_fee_multiplier: FeeMultiplier
    last_minute_pass_allowed: bool
    image_url: str
    created_by: str
    created_at: datetime
    updated_at: datetime

    def is_owned_by(self, principal_id: str) -> bool:
        return self.created_by == principal_id
