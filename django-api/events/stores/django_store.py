"""Django ORM implementation of the EventStore."""

from events import models as orm
from events.domain import Capacity, Event, EventId, FeeMultiplier, Money
from events.stores.interfaces import EventStore

MUTABLE_FIELDS = [
    "title",
    "description",
    "date",
    "time",
    "location",
    "base_fee",
    "capacity",
    "last_minute_fee_multiplier",
    "last_minute_pass_allowed",
    "image_url",
    "updated_at",
]


def to_domain(row: orm.Event) -> Event:
    return Event(
        id=EventId(value=row.id),
        title=row.title,
        description=row.description,
        date=row.date,
        time=row.time,
        location=row.location,
        base_fee=Money(amount=row.base_fee),
        capacity=Capacity(value=row.capacity),
        last_minute_fee_multiplier=FeeMultiplier(value=row.last_minute_fee_multiplier),
        last_minute_pass_allowed=row.last_minute_pass_allowed,
        image_url=row.image_url,
        created_by=str(row.created_by_id),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM."""

    def list_events(self) -> list[Event]:
        return [to_domain(row) for row in orm.Event.objects.order_by("date")]

    def get_event(self, event_id: EventId) -> Event | None:
        row = orm.Event.objects.filter(pk=event_id.value).first()
        return to_domain(row) if row is not None else None

    def create_event(self, event: Event) -> Event:
        row = orm.Event.objects.create(
            id=event.id.value,
            title=event.title,
            description=event.description,
            date=event.date,
            time=event.time,
            location=event.location,
            base_fee=event.base_fee.amount,
            capacity=event.capacity.value,
            last_minute_fee_multiplier=event.last_minute_fee_multiplier.value,
            last_minute_pass_allowed=event.last_minute_pass_allowed,
            image_url=event.image_url,
            created_by_id=event.created_by,
        )
        return to_domain(row)

    def update_event(self, event: Event) -> Event:
        row = orm.Event.objects.get(pk=event.id.value)
        row.title = event.title
        row.description = event.description
        row.date = event.date
        row.time = event.time
        row.location = event.location
        row.base_fee = event.base_fee.amount
        row.capacity = event.capacity.value
        row.last_minute_fee_multiplier = event.last_minute_fee_multiplier.value
        row.last_minute_pass_allowed = event.last_minute_pass_allowed
        row.image_url = event.image_url
        row.save(update_fields=MUTABLE_FIELDS)
        return to_domain(row)

    def delete_event(self, event_id: EventId) -> bool:
        row = orm.Event.objects.filter(pk=event_id.value).first()
        if row is None:
            return False
        row.delete()
        return True
