"""Unit tests for RegistrationService admission and lifecycle rules.

Run with: pytest tests/test_registration_service.py -v
"""

import threading
import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from accounts.principal import Principal
from core.errors import ForbiddenError, UnauthorizedError
from events.domain.errors import EventClosedError, EventNotFoundError, InvalidEventIdError
from registrations.domain import (
    IndividualParty,
    PartyKind,
    PaymentStatus,
    RegistrationPatch,
    TeamParty,
    TicketType,
)
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
from registrations.services.registration_service import RegistrationService, compute_fee

from conftest import NOW


@pytest.fixture
def service(catalog, ledger, clock) -> RegistrationService:
    return RegistrationService(catalog, ledger, clock=clock)


def team(name="Quarks", members=("Ann", "Ben", "Cy"), size=None, proof="payment_proofs/2/x.pdf"):
    return TeamParty(
        team_name=name,
        members=tuple(members),
        declared_size=len(members) if size is None else size,
        payment_proof_ref=proof,
        paper_title="On Quarks",
        abstract="Short abstract",
    )


def principal(n: int):
    return Principal(id=str(1000 + n), role="coordinator", name=f"User {n}")


class TestCapacityScenario:
    """Capacity 2, base fee 100, multiplier 1.75."""

    def test_full_scenario(self, service, ledger, make_event):
        event = make_event(capacity=2, base_fee="100", multiplier="1.75")
        event_id = str(event.id)

        a = service.register(event_id, principal(1), IndividualParty())
        assert a.fee_total.amount == Decimal("100.00")
        assert a.is_last_minute is False
        assert ledger.count_active(event.id) == 1

        b = service.register(event_id, principal(2), IndividualParty())
        assert b.fee_total.amount == Decimal("100.00")
        assert ledger.count_active(event.id) == 2

        with pytest.raises(CapacityExceededError):
            service.register(event_id, principal(3), IndividualParty())
        assert ledger.count_active(event.id) == 2

        c = service.register(event_id, principal(3), IndividualParty(), requested_last_minute=True)
        assert c.fee_total.amount == Decimal("175.00")
        assert c.is_last_minute is True
        assert ledger.count_active(event.id) == 3

    @pytest.mark.parametrize("capacity", [1, 3, 5])
    def test_registration_after_capacity_needs_flag(self, service, make_event, capacity):
        event = make_event(capacity=capacity)
        for n in range(capacity):
            service.register(str(event.id), principal(n), IndividualParty())

        with pytest.raises(CapacityExceededError):
            service.register(str(event.id), principal(capacity), IndividualParty())

        extra = service.register(
            str(event.id), principal(capacity), IndividualParty(), requested_last_minute=True
        )
        assert extra.is_last_minute is True

    def test_flag_below_capacity_is_not_last_minute(self, service, make_event):
        event = make_event(capacity=5)
        registration = service.register(
            str(event.id), principal(1), IndividualParty(), requested_last_minute=True
        )
        assert registration.is_last_minute is False
        assert registration.fee_total.amount == Decimal("100.00")

    def test_event_without_passes_stays_closed_when_full(self, service, make_event):
        event = make_event(capacity=1, pass_allowed=False)
        service.register(str(event.id), principal(1), IndividualParty())
        with pytest.raises(CapacityExceededError):
            service.register(str(event.id), principal(2), IndividualParty(), requested_last_minute=True)

    def test_cancelled_registrations_free_capacity(self, service, make_event):
        event = make_event(capacity=1)
        first = service.register(str(event.id), principal(1), IndividualParty())
        service.cancel(str(first.id), principal(1))
        second = service.register(str(event.id), principal(2), IndividualParty())
        assert second.is_last_minute is False


class TestFees:
    def test_team_fee_scales_with_party_size(self, service, make_event, attendee):
        event = make_event(capacity=10, base_fee="40")
        registration = service.register(str(event.id), attendee, team(members=("a", "b", "c")))
        assert registration.fee_total.amount == Decimal("120.00")
        assert registration.party_size == 3

    def test_last_minute_fee_rounds_to_whole_unit(self, make_event):
        event = make_event(base_fee="33.33", multiplier="1.75")
        # 33.33 * 1.75 = 58.3275
        assert compute_fee(event, 1, True).amount == Decimal("58.00")
        # 66.66 * 1.75 = 116.655
        assert compute_fee(event, 2, True).amount == Decimal("117.00")

    def test_regular_fee_keeps_cents(self, make_event):
        event = make_event(base_fee="33.33")
        assert compute_fee(event, 2, False).amount == Decimal("66.66")

    def test_last_minute_team_fee(self, service, make_event, attendee):
        event = make_event(capacity=1, base_fee="100", multiplier="1.75")
        service.register(str(event.id), principal(1), IndividualParty())
        registration = service.register(
            str(event.id), attendee, team(members=("a", "b")), requested_last_minute=True
        )
        assert registration.fee_total.amount == Decimal("350.00")

    def test_free_event(self, service, make_event, attendee):
        event = make_event(base_fee="0")
        assert service.register(str(event.id), attendee, IndividualParty()).fee_total.amount == 0


class TestAdmissionRejections:
    def test_unknown_event(self, service, attendee):
        with pytest.raises(EventNotFoundError):
            service.register(str(uuid.uuid4()), attendee, IndividualParty())

    def test_malformed_event_id(self, service, attendee):
        with pytest.raises(InvalidEventIdError):
            service.register("123", attendee, IndividualParty())

    def test_anonymous_registrant(self, service, make_event):
        event = make_event()
        with pytest.raises(UnauthorizedError):
            service.register(str(event.id), None, IndividualParty())

    @pytest.mark.parametrize("last_minute", [False, True])
    def test_past_event_is_closed_regardless_of_capacity(self, service, make_event, attendee, last_minute):
        event = make_event(capacity=100, date=NOW - timedelta(minutes=1))
        with pytest.raises(EventClosedError):
            service.register(str(event.id), attendee, IndividualParty(), requested_last_minute=last_minute)

    def test_event_starting_now_is_open(self, service, make_event, attendee):
        event = make_event(date=NOW)
        assert service.register(str(event.id), attendee, IndividualParty())

    def test_sequential_duplicate(self, service, make_event, attendee):
        event = make_event()
        service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(DuplicateRegistrationError):
            service.register(str(event.id), attendee, IndividualParty(ticket_type=TicketType.VIP))

    def test_duplicate_checked_before_capacity(self, service, make_event, attendee):
        event = make_event(capacity=1)
        service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(DuplicateRegistrationError):
            service.register(str(event.id), attendee, IndividualParty())

    def test_reregister_after_cancel(self, service, make_event, attendee):
        event = make_event()
        first = service.register(str(event.id), attendee, IndividualParty())
        service.cancel(str(first.id), attendee)
        second = service.register(str(event.id), attendee, IndividualParty())
        assert second.id != first.id

    def test_duplicate_team_name_is_rejected_for_any_registrant(self, service, make_event, attendee, other_attendee):
        event = make_event()
        service.register(str(event.id), attendee, team(name="Quarks"))
        with pytest.raises(DuplicateRegistrationError):
            service.register(str(event.id), other_attendee, team(name="  Quarks "))

    def test_stale_read_duplicate_maps_conflict(self, catalog, stale_ledger, clock, make_event, attendee):
        service = RegistrationService(catalog, stale_ledger, clock=clock)
        event = make_event()
        service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(DuplicateRegistrationError):
            service.register(str(event.id), attendee, IndividualParty())
        assert stale_ledger.count_active(event.id) == 1

    def test_concurrent_duplicate_admits_exactly_one(self, catalog, stale_ledger, clock, make_event, attendee):
        service = RegistrationService(catalog, stale_ledger, clock=clock)
        event = make_event(capacity=10)
        barrier = threading.Barrier(2)
        outcomes = []

        def attempt():
            barrier.wait()
            try:
                outcomes.append(service.register(str(event.id), attendee, IndividualParty()))
            except DuplicateRegistrationError as exc:
                outcomes.append(exc)

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(isinstance(o, DuplicateRegistrationError) for o in outcomes) == 1
        assert stale_ledger.count_active(event.id) == 1


class TestTeamRegistration:
    @pytest.mark.parametrize("members", [("solo",), ("a", "b", "c", "d", "e")])
    def test_size_out_of_range(self, service, make_event, attendee, members):
        event = make_event()
        with pytest.raises(InvalidPartySizeError):
            service.register(str(event.id), attendee, team(members=members))

    def test_three_members_succeeds(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, team(members=("a", "b", "c"), size=3))
        assert registration.party_kind is PartyKind.TEAM
        assert registration.team_members == ("a", "b", "c")
        assert registration.party_key == "team:Quarks"
        assert registration.payment_status is PaymentStatus.PENDING

    def test_declared_size_must_match_roster(self, service, make_event, attendee):
        event = make_event()
        with pytest.raises(InvalidPartySizeError):
            service.register(str(event.id), attendee, team(members=("a", "b"), size=3))

    def test_payment_proof_required(self, service, make_event, attendee):
        event = make_event()
        with pytest.raises(MissingPaymentProofError):
            service.register(str(event.id), attendee, team(proof="  "))

    def test_blank_team_name(self, service, make_event, attendee):
        event = make_event()
        with pytest.raises(InvalidPartyError):
            service.register(str(event.id), attendee, team(name="   "))

    def test_individual_and_team_keys_do_not_collide(self, service, make_event, attendee):
        event = make_event()
        service.register(str(event.id), attendee, IndividualParty())
        assert service.register(str(event.id), attendee, team())


class TestRegistrationRecord:
    def test_snapshot_and_codes(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(
            str(event.id),
            attendee,
            IndividualParty(ticket_type=TicketType.PREMIUM, dietary="vegan"),
        )
        assert registration.registrant_id == attendee.id
        assert registration.name == "Ada Attendee"
        assert registration.department == "Physics"
        assert registration.ticket_type is TicketType.PREMIUM
        assert registration.dietary == "vegan"
        assert registration.payment_status is PaymentStatus.PENDING
        assert registration.registered_at == NOW
        assert registration.ticket_code.endswith(registration.id.value.hex[-6:].upper())
        assert registration.party_key == f"user:{attendee.id}"

    def test_injected_ticket_codes(self, catalog, ledger, clock, make_event, attendee):
        service = RegistrationService(catalog, ledger, clock=clock, ticket_codes=lambda rid: "FIXED-000001")
        event = make_event()
        assert service.register(str(event.id), attendee, IndividualParty()).ticket_code == "FIXED-000001"


class TestCancel:
    def test_cancel_marks_cancelled_and_keeps_row(self, service, ledger, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        cancelled = service.cancel(str(registration.id), attendee)
        assert cancelled.payment_status is PaymentStatus.CANCELLED
        assert ledger.get(registration.id) is not None
        assert ledger.count_active(event.id) == 0

    def test_second_cancel_is_rejected_without_touching_counts(self, service, ledger, make_event, attendee, other_attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.register(str(event.id), other_attendee, IndividualParty())
        service.cancel(str(registration.id), attendee)
        with pytest.raises(InvalidStatusTransitionError):
            service.cancel(str(registration.id), attendee)
        assert ledger.count_active(event.id) == 1

    def test_admin_can_cancel(self, service, make_event, attendee, admin):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        assert service.cancel(str(registration.id), admin).payment_status is PaymentStatus.CANCELLED

    def test_other_user_cannot_cancel(self, service, make_event, attendee, other_attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(ForbiddenError):
            service.cancel(str(registration.id), other_attendee)

    def test_cancel_after_event_passed(self, service, catalog, ledger, make_event, attendee):
        event = make_event(date=NOW + timedelta(hours=1))
        registration = service.register(str(event.id), attendee, IndividualParty())
        later = RegistrationService(catalog, ledger, clock=lambda: NOW + timedelta(hours=2))
        with pytest.raises(EventClosedError):
            later.cancel(str(registration.id), attendee)

    def test_paid_registration_can_be_cancelled(self, service, make_event, organizer, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.set_payment_status(str(registration.id), organizer, PaymentStatus.PAID)
        assert service.cancel(str(registration.id), attendee).payment_status is PaymentStatus.CANCELLED

    def test_stale_snapshot_cannot_revive_cancelled(self, service, ledger, make_event, organizer, attendee):
        """A transition checked against an outdated read must not overwrite Cancelled."""
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.cancel(str(registration.id), attendee)

        # The organizer's request read the registration while it was still Pending.
        ledger.get = lambda registration_id: registration

        with pytest.raises(InvalidStatusTransitionError):
            service.set_payment_status(str(registration.id), organizer, PaymentStatus.PAID)
        assert ledger.rows[registration.id].payment_status is PaymentStatus.CANCELLED
        assert ledger.count_active(event.id) == 0

    def test_unknown_registration(self, service, attendee):
        with pytest.raises(RegistrationNotFoundError):
            service.cancel(str(uuid.uuid4()), attendee)

    def test_malformed_registration_id(self, service, attendee):
        with pytest.raises(InvalidRegistrationIdError):
            service.cancel("abc", attendee)


class TestUpdate:
    def test_update_changes_display_fields_only(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        updated = service.update(
            str(registration.id),
            attendee,
            RegistrationPatch(ticket_type=TicketType.VIP, special_requirements="wheelchair"),
        )
        assert updated.ticket_type is TicketType.VIP
        assert updated.special_requirements == "wheelchair"
        assert updated.fee_total == registration.fee_total
        assert updated.ticket_code == registration.ticket_code
        assert updated.party_key == registration.party_key

    def test_empty_patch_is_noop(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        assert service.update(str(registration.id), attendee, RegistrationPatch()) == registration

    def test_update_forbidden_for_other_user(self, service, make_event, attendee, other_attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(ForbiddenError):
            service.update(str(registration.id), other_attendee, RegistrationPatch(dietary="none"))

    def test_update_after_event_passed(self, service, catalog, ledger, make_event, attendee):
        event = make_event(date=NOW + timedelta(minutes=5))
        registration = service.register(str(event.id), attendee, IndividualParty())
        later = RegistrationService(catalog, ledger, clock=lambda: NOW + timedelta(days=1))
        with pytest.raises(EventClosedError):
            later.update(str(registration.id), attendee, RegistrationPatch(dietary="none"))

    def test_update_cancelled_registration(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.cancel(str(registration.id), attendee)
        with pytest.raises(RegistrationCancelledError):
            service.update(str(registration.id), attendee, RegistrationPatch(dietary="none"))


class TestOrganizerOperations:
    def test_list_for_event_requires_owner_or_admin(self, service, make_event, organizer, admin, attendee):
        event = make_event()
        service.register(str(event.id), attendee, IndividualParty())
        assert len(service.list_for_event(str(event.id), organizer)) == 1
        assert len(service.list_for_event(str(event.id), admin)) == 1
        with pytest.raises(ForbiddenError):
            service.list_for_event(str(event.id), attendee)

    def test_payment_lifecycle(self, service, make_event, organizer, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        paid = service.set_payment_status(str(registration.id), organizer, PaymentStatus.PAID)
        assert paid.payment_status is PaymentStatus.PAID
        refunded = service.set_payment_status(str(registration.id), organizer, PaymentStatus.REFUNDED)
        assert refunded.payment_status is PaymentStatus.REFUNDED
        with pytest.raises(InvalidStatusTransitionError):
            service.set_payment_status(str(registration.id), organizer, PaymentStatus.PAID)

    def test_registrant_cannot_mark_paid(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(ForbiddenError):
            service.set_payment_status(str(registration.id), attendee, PaymentStatus.PAID)

    def test_hard_delete(self, service, ledger, make_event, organizer, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.delete(str(registration.id), organizer, event_id=str(event.id))
        assert ledger.get(registration.id) is None

    def test_hard_delete_checks_event_match(self, service, make_event, organizer, attendee):
        event = make_event()
        other_event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(RegistrationNotFoundError):
            service.delete(str(registration.id), organizer, event_id=str(other_event.id))

    def test_registrant_cannot_hard_delete(self, service, make_event, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        with pytest.raises(ForbiddenError):
            service.delete(str(registration.id), attendee)

    def test_check_in_once(self, service, make_event, organizer, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        checked = service.check_in(registration.ticket_code.lower(), organizer)
        assert checked.checked_in_at == NOW
        with pytest.raises(AlreadyCheckedInError):
            service.check_in(registration.ticket_code, organizer)

    def test_check_in_cancelled(self, service, make_event, organizer, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.cancel(str(registration.id), attendee)
        with pytest.raises(RegistrationCancelledError):
            service.check_in(registration.ticket_code, organizer)

    def test_check_in_refunded(self, service, make_event, organizer, attendee):
        event = make_event()
        registration = service.register(str(event.id), attendee, IndividualParty())
        service.set_payment_status(str(registration.id), organizer, PaymentStatus.PAID)
        service.set_payment_status(str(registration.id), organizer, PaymentStatus.REFUNDED)
        with pytest.raises(InvalidStatusTransitionError):
            service.check_in(registration.ticket_code, organizer)

    def test_check_in_unknown_code(self, service, organizer):
        with pytest.raises(RegistrationNotFoundError):
            service.check_in("NOPE00-000000", organizer)


class TestRegistrantQueries:
    def test_list_and_get_mine(self, service, make_event, attendee, other_attendee):
        first = make_event()
        second = make_event()
        service.register(str(first.id), attendee, IndividualParty())
        service.register(str(second.id), attendee, IndividualParty())
        service.register(str(first.id), other_attendee, IndividualParty())

        mine = service.list_for_registrant(attendee)
        assert {r.event_id for r in mine} == {first.id, second.id}
        assert service.get_for_registrant(str(second.id), attendee).event_id == second.id

    def test_get_mine_not_registered(self, service, make_event, attendee):
        event = make_event()
        with pytest.raises(RegistrationNotFoundError):
            service.get_for_registrant(str(event.id), attendee)
