"""Registration service - admission rules and registration lifecycle.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Admission runs the checks in a fixed order and stops at the first failure:
event exists, event not past, party not already registered, team roster
valid, capacity (or an explicit last-minute pass), then insert. The ledger's
unique constraint is the final word on duplicates; capacity is best-effort.
"""

import logging
from collections.abc import Callable

from accounts.principal import Principal
from core.clock import Clock, now
from core.errors import ConflictError, ForbiddenError, UnauthorizedError
from events.domain.errors import EventClosedError, EventNotFoundError
from events.domain.models import Event
from events.domain.value_objects import EventId, Money
from events.services.event_service import can_manage_event, parse_event_id
from events.stores.interfaces import EventStore
from registrations.domain import payment_status
from registrations.domain.errors import (
    AlreadyCheckedInError,
    CapacityExceededError,
    DuplicateRegistrationError,
    InvalidPartyError,
    InvalidPartySizeError,
    InvalidRegistrationIdError,
    InvalidStatusTransitionError,
    MissingPaymentProofError,
    RegistrationCancelledError,
    RegistrationNotFoundError,
)
from registrations.domain.models import (
    TEAM_MAX_SIZE,
    TEAM_MIN_SIZE,
    IndividualParty,
    Party,
    PaymentStatus,
    Registration,
    RegistrationPatch,
    TeamParty,
)
from registrations.domain.value_objects import RegistrationId, new_ticket_code
from registrations.stores.interfaces import RegistrationLedger

logger = logging.getLogger("turnstile.registrations")


def compute_fee(event: Event, party_size: int, is_last_minute: bool) -> Money:
    """Authoritative charge for a party.

    base_fee * party_size, times the last-minute multiplier when the pass is
    used. Last-minute totals are rounded to a whole currency unit.
    """
    total = event.base_fee.times(party_size)
    if is_last_minute:
        return total.times(event.last_minute_fee_multiplier.value).rounded_to_whole_unit()
    return total.rounded()


def parse_registration_id(registration_id: str) -> RegistrationId:
    try:
        return RegistrationId.from_string(registration_id)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidRegistrationIdError() from exc


class RegistrationService:
    """Service for admitting and managing registrations."""

    def __init__(
        self,
        catalog: EventStore,
        ledger: RegistrationLedger,
        clock: Clock = now,
        ticket_codes: Callable[[RegistrationId], str] = new_ticket_code,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._clock = clock
        self._ticket_codes = ticket_codes

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def register(
        self,
        event_id: str,
        registrant: Principal | None,
        party: Party,
        requested_last_minute: bool = False,
    ) -> Registration:
        """Admit a party to an event.

        Raises:
            UnauthorizedError: If no registrant is given.
            InvalidEventIdError, EventNotFoundError: If the event cannot be loaded.
            EventClosedError: If the event date has passed.
            InvalidPartyError: If a team has no usable name.
            DuplicateRegistrationError: If the party already holds an active registration.
            InvalidPartySizeError: If a team is not 2-4 members or its roster disagrees.
            MissingPaymentProofError: If a team did not attach payment proof.
            CapacityExceededError: If the event is full and no last-minute pass applies.
        """
        if registrant is None:
            raise UnauthorizedError()

        event = self._load_event(parse_event_id(event_id))
        admitted_at = self._clock()
        if event.date < admitted_at:
            logger.warning("Registration rejected, event closed: event=%s", event.id)
            raise EventClosedError(str(event.id))

        party_key = self._party_key(party, registrant)
        if self._ledger.find_by_party_key(event.id, party_key) is not None:
            logger.warning(
                "Registration rejected, duplicate: event=%s, party=%s", event.id, party_key
            )
            raise DuplicateRegistrationError(str(event.id), party_key)

        if isinstance(party, TeamParty):
            self._validate_team(party)

        active_count = self._ledger.count_active(event.id)
        is_last_minute = False
        if event.capacity.is_reached_by(active_count):
            if not (requested_last_minute and event.last_minute_pass_allowed):
                logger.warning(
                    "Registration rejected, capacity reached: event=%s, active=%s, capacity=%s",
                    event.id,
                    active_count,
                    event.capacity.value,
                )
                raise CapacityExceededError(
                    str(event.id), event.capacity.value, event.last_minute_pass_allowed
                )
            is_last_minute = True

        registration_id = RegistrationId.new()
        registration = Registration(
            id=registration_id,
            event_id=event.id,
            registrant_id=registrant.id,
            party_kind=party.kind,
            party_key=party_key,
            party_size=party.size,
            fee_total=compute_fee(event, party.size, is_last_minute),
            is_last_minute=is_last_minute,
            payment_status=payment_status.INITIAL_STATUS,
            ticket_code=self._ticket_codes(registration_id),
            registered_at=admitted_at,
            name=registrant.name,
            email=registrant.email,
            department=registrant.department or "Not specified",
            **self._party_fields(party),
        )

        try:
            saved = self._ledger.insert(registration)
        except ConflictError as exc:
            logger.warning(
                "Registration rejected, concurrent duplicate: event=%s, party=%s",
                event.id,
                party_key,
            )
            raise DuplicateRegistrationError(str(event.id), party_key) from exc

        logger.info(
            "Registration created: registration=%s, event=%s, registrant=%s, fee=%s, last_minute=%s",
            saved.id,
            event.id,
            registrant.id,
            saved.fee_total,
            saved.is_last_minute,
        )
        return saved

    # ------------------------------------------------------------------
    # Registrant operations
    # ------------------------------------------------------------------

    def cancel(self, registration_id: str, requester: Principal) -> Registration:
        """Cancel a registration; the row stays, its status becomes Cancelled.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
            ForbiddenError: If the requester is neither the registrant nor an admin.
            EventClosedError: If the event date has passed.
            InvalidStatusTransitionError: If the registration is already cancelled or refunded.
        """
        registration = self._load(registration_id)
        self._ensure_owner_or_admin(registration, requester)
        self._ensure_event_open(registration, action="cancel registration for")
        return self._transition(registration, PaymentStatus.CANCELLED, requester)

    def update(self, registration_id: str, requester: Principal, patch: RegistrationPatch) -> Registration:
        """Change the display fields of a registration.

        Fee, party key, event, registrant and ticket code never change here.
        """
        registration = self._load(registration_id)
        self._ensure_owner_or_admin(registration, requester)
        self._ensure_event_open(registration, action="update registration for")
        if registration.payment_status is PaymentStatus.CANCELLED:
            raise RegistrationCancelledError(str(registration.id))

        changes = patch.changes()
        if not changes:
            return registration

        updated = self._ledger.update_details(registration.id, changes)
        logger.info(
            "Registration updated: registration=%s, actor=%s, fields=%s",
            registration.id,
            requester.id,
            sorted(changes),
        )
        return updated

    def list_for_registrant(self, requester: Principal) -> list[Registration]:
        return self._ledger.list_for_registrant(requester.id)

    def get_for_registrant(self, event_id: str, requester: Principal) -> Registration:
        parsed = parse_event_id(event_id)
        registration = self._ledger.find_for_registrant(parsed, requester.id)
        if registration is None:
            raise RegistrationNotFoundError(str(event_id))
        return registration

    # ------------------------------------------------------------------
    # Organizer operations
    # ------------------------------------------------------------------

    def list_for_event(self, event_id: str, requester: Principal) -> list[Registration]:
        """Return every registration of an event, cancelled ones included."""
        event = self._load_event(parse_event_id(event_id))
        self._ensure_can_manage(event, requester)
        return self._ledger.list_for_event(event.id)

    def set_payment_status(
        self, registration_id: str, requester: Principal, new_status: PaymentStatus
    ) -> Registration:
        """Record a (simulated) payment outcome: mark paid, refund or cancel."""
        registration = self._load(registration_id)
        event = self._load_event(registration.event_id)
        self._ensure_can_manage(event, requester)
        return self._transition(registration, new_status, requester)

    def delete(self, registration_id: str, requester: Principal, event_id: str | None = None) -> None:
        """Hard-delete a registration. Only the event owner or an admin may do this."""
        registration = self._load(registration_id)
        if event_id is not None and registration.event_id != parse_event_id(event_id):
            raise RegistrationNotFoundError(str(registration_id))
        event = self._load_event(registration.event_id)
        self._ensure_can_manage(event, requester)
        if not self._ledger.delete(registration.id):
            raise RegistrationNotFoundError(str(registration_id))
        logger.info(
            "Registration deleted: registration=%s, event=%s, actor=%s",
            registration.id,
            event.id,
            requester.id,
        )

    def check_in(self, ticket_code: str, requester: Principal) -> Registration:
        """Admit a ticket holder at the door."""
        code = ticket_code.strip().upper()
        registration = self._ledger.get_by_ticket_code(code)
        if registration is None:
            raise RegistrationNotFoundError(code)
        event = self._load_event(registration.event_id)
        self._ensure_can_manage(event, requester)

        if registration.payment_status is PaymentStatus.CANCELLED:
            raise RegistrationCancelledError(str(registration.id))
        if payment_status.is_terminal_status(registration.payment_status):
            raise InvalidStatusTransitionError(
                f"Cannot check in a {registration.payment_status.value.lower()} registration"
            )
        if registration.checked_in_at is not None:
            raise AlreadyCheckedInError(str(registration.id))

        checked_in = self._ledger.mark_checked_in(registration.id, self._clock())
        logger.info(
            "Ticket checked in: registration=%s, event=%s, actor=%s",
            registration.id,
            event.id,
            requester.id,
        )
        return checked_in

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load(self, registration_id: str) -> Registration:
        parsed = parse_registration_id(registration_id)
        registration = self._ledger.get(parsed)
        if registration is None:
            raise RegistrationNotFoundError(str(registration_id))
        return registration

    def _load_event(self, event_id: EventId) -> Event:
        event = self._catalog.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def _ensure_event_open(self, registration: Registration, action: str) -> None:
        event = self._load_event(registration.event_id)
        if event.date < self._clock():
            raise EventClosedError(str(event.id), action=action)

    def _ensure_owner_or_admin(self, registration: Registration, requester: Principal) -> None:
        if not (registration.is_owned_by(requester.id) or requester.is_admin):
            logger.warning(
                "Registration access denied: registration=%s, actor=%s",
                registration.id,
                requester.id,
            )
            raise ForbiddenError("Not authorized to modify this registration")

    def _ensure_can_manage(self, event: Event, requester: Principal) -> None:
        if not can_manage_event(event, requester):
            logger.warning(
                "Registration management denied: event=%s, actor=%s", event.id, requester.id
            )
            raise ForbiddenError("Not authorized to manage registrations for this event")

    def _transition(
        self, registration: Registration, new_status: PaymentStatus, actor: Principal
    ) -> Registration:
        allowed, reason = payment_status.can_transition(registration.payment_status, new_status)
        if not allowed:
            logger.warning(
                "Invalid payment transition attempted: registration=%s, from=%s, to=%s, actor=%s",
                registration.id,
                registration.payment_status.value,
                new_status.value,
                actor.id,
            )
            raise InvalidStatusTransitionError(reason)

        try:
            updated = self._ledger.update_status(
                registration.id, registration.payment_status, new_status
            )
        except InvalidStatusTransitionError:
            logger.warning(
                "Payment status changed concurrently: registration=%s, expected=%s, to=%s, actor=%s",
                registration.id,
                registration.payment_status.value,
                new_status.value,
                actor.id,
            )
            raise

        logger.info(
            "Payment status transition: registration=%s, from=%s, to=%s, actor=%s",
            registration.id,
            registration.payment_status.value,
            new_status.value,
            actor.id,
        )
        return updated

    @staticmethod
    def _party_key(party: Party, registrant: Principal) -> str:
        if isinstance(party, TeamParty) and not party.normalized_name:
            raise InvalidPartyError("Team name is required")
        return party.party_key(registrant.id)

    @staticmethod
    def _validate_team(party: TeamParty) -> None:
        if not TEAM_MIN_SIZE <= party.declared_size <= TEAM_MAX_SIZE:
            raise InvalidPartySizeError(
                f"Team size must be between {TEAM_MIN_SIZE} and {TEAM_MAX_SIZE}"
            )
        if len(party.members) != party.declared_size:
            raise InvalidPartySizeError(
                f"Team declares {party.declared_size} members but lists {len(party.members)}"
            )
        if not (party.payment_proof_ref or "").strip():
            raise MissingPaymentProofError()

    @staticmethod
    def _party_fields(party: Party) -> dict:
        if isinstance(party, IndividualParty):
            return {
                "ticket_type": party.ticket_type,
                "special_requirements": party.special_requirements,
                "dietary": party.dietary,
            }
        return {
            "team_name": party.normalized_name,
            "team_members": tuple(party.members),
            "paper_title": party.paper_title,
            "abstract": party.abstract,
            "payment_proof_ref": party.payment_proof_ref.strip(),
        }
