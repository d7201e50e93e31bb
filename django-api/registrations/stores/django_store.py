"""Django ORM implementation of the RegistrationLedger."""

import logging
from datetime import datetime

from django.db import IntegrityError, transaction

from core.errors import ConflictError
from events.domain import EventId, Money
from registrations import models as orm
from registrations.domain import (
    PartyKind,
    PaymentStatus,
    Registration,
    RegistrationId,
    TicketType,
)
from registrations.domain.errors import InvalidStatusTransitionError, RegistrationNotFoundError
from registrations.stores.interfaces import RegistrationLedger

logger = logging.getLogger("turnstile.registrations")

DETAIL_FIELDS = ("ticket_type", "special_requirements", "dietary")


def to_domain(row: orm.Registration) -> Registration:
    return Registration(
        id=RegistrationId(value=row.id),
        event_id=EventId(value=row.event_id),
        registrant_id=str(row.registrant_id),
        party_kind=PartyKind(row.party_kind),
        party_key=row.party_key,
        party_size=row.party_size,
        fee_total=Money(amount=row.fee_total),
        is_last_minute=row.is_last_minute,
        payment_status=PaymentStatus(row.payment_status),
        ticket_code=row.ticket_code,
        registered_at=row.registered_at,
        name=row.name,
        email=row.email,
        department=row.department,
        ticket_type=TicketType(row.ticket_type),
        special_requirements=row.special_requirements,
        dietary=row.dietary,
        team_name=row.team_name,
        team_members=tuple(row.team_members or ()),
        paper_title=row.paper_title,
        abstract=row.abstract,
        payment_proof_ref=row.payment_proof_ref,
        checked_in_at=row.checked_in_at,
    )


def is_active_party_conflict(exc: IntegrityError) -> bool:
    """True when exc was raised by the one-active-registration-per-party index.

    PostgreSQL drivers name the violated index in `diag.constraint_name`.
    SQLite only reports the columns, e.g.
    "UNIQUE constraint failed: registrations_registration.event_id,
    registrations_registration.party_key", so there the message is matched.
    """
    diag = getattr(exc.__cause__, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return constraint == orm.UNIQUE_ACTIVE_PARTY
    text = str(exc)
    return "UNIQUE constraint failed" in text and "party_key" in text


class DjangoRegistrationLedger(RegistrationLedger):
    """Relational ledger; uniqueness comes from a partial unique index."""

    def _active(self, event_id: EventId):
        return orm.Registration.objects.filter(event_id=event_id.value).exclude(
            payment_status=orm.Registration.STATUS_CANCELLED
        )

    def _row(self, registration_id: RegistrationId) -> orm.Registration:
        try:
            return orm.Registration.objects.get(pk=registration_id.value)
        except orm.Registration.DoesNotExist as exc:
            raise RegistrationNotFoundError(str(registration_id)) from exc

    def count_active(self, event_id: EventId) -> int:
        return self._active(event_id).count()

    def find_by_party_key(self, event_id: EventId, party_key: str) -> Registration | None:
        row = self._active(event_id).filter(party_key=party_key).first()
        return to_domain(row) if row is not None else None

    def insert(self, registration: Registration) -> Registration:
        try:
            with transaction.atomic():
                row = orm.Registration.objects.create(
                    id=registration.id.value,
                    event_id=registration.event_id.value,
                    registrant_id=registration.registrant_id,
                    party_kind=registration.party_kind.value,
                    party_key=registration.party_key,
                    party_size=registration.party_size,
                    name=registration.name,
                    email=registration.email,
                    department=registration.department,
                    ticket_type=registration.ticket_type.value,
                    special_requirements=registration.special_requirements,
                    dietary=registration.dietary,
                    team_name=registration.team_name,
                    team_members=list(registration.team_members),
                    paper_title=registration.paper_title,
                    abstract=registration.abstract,
                    fee_total=registration.fee_total.amount,
                    is_last_minute=registration.is_last_minute,
                    payment_status=registration.payment_status.value,
                    payment_proof_ref=registration.payment_proof_ref,
                    ticket_code=registration.ticket_code,
                    registered_at=registration.registered_at,
                )
        except IntegrityError as exc:
            if not is_active_party_conflict(exc):
                raise
            logger.info(
                "Insert rejected by unique constraint: event=%s, party=%s",
                registration.event_id,
                registration.party_key,
            )
            raise ConflictError() from exc
        return to_domain(row)

    def update_status(
        self,
        registration_id: RegistrationId,
        expected: PaymentStatus,
        new_status: PaymentStatus,
    ) -> Registration:
        changed = orm.Registration.objects.filter(
            pk=registration_id.value, payment_status=expected.value
        ).update(payment_status=new_status.value)
        row = self._row(registration_id)
        if not changed:
            raise InvalidStatusTransitionError(
                f"Payment status is '{row.payment_status}', expected '{expected.value}'"
            )
        return to_domain(row)

    def get(self, registration_id: RegistrationId) -> Registration | None:
        row = orm.Registration.objects.filter(pk=registration_id.value).first()
        return to_domain(row) if row is not None else None

    def get_by_ticket_code(self, ticket_code: str) -> Registration | None:
        row = orm.Registration.objects.filter(ticket_code=ticket_code).first()
        return to_domain(row) if row is not None else None

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        rows = orm.Registration.objects.filter(event_id=event_id.value).order_by("-registered_at")
        return [to_domain(row) for row in rows]

    def list_for_registrant(self, registrant_id: str) -> list[Registration]:
        rows = orm.Registration.objects.filter(registrant_id=registrant_id).order_by("-registered_at")
        return [to_domain(row) for row in rows]

    def find_for_registrant(self, event_id: EventId, registrant_id: str) -> Registration | None:
        row = (
            orm.Registration.objects.filter(event_id=event_id.value, registrant_id=registrant_id)
            .order_by("-registered_at")
            .first()
        )
        return to_domain(row) if row is not None else None

    def update_details(self, registration_id: RegistrationId, changes: dict) -> Registration:
        row = self._row(registration_id)
        fields = []
        for name in DETAIL_FIELDS:
            if name in changes:
                value = changes[name]
                setattr(row, name, value.value if isinstance(value, TicketType) else value)
                fields.append(name)
        if fields:
            row.save(update_fields=fields)
        return to_domain(row)

    def mark_checked_in(self, registration_id: RegistrationId, when: datetime) -> Registration:
        row = self._row(registration_id)
        row.checked_in_at = when
        row.save(update_fields=["checked_in_at"])
        return to_domain(row)

    def delete(self, registration_id: RegistrationId) -> bool:
        deleted, _ = orm.Registration.objects.filter(pk=registration_id.value).delete()
        return deleted > 0
