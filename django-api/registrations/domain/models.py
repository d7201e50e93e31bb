"""Domain models for registrations.

A registration is admitted for one party: either the registrant alone
(IndividualParty) or a named team (TeamParty). Both share the same
admission rules; only the party key and size differ.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from events.domain.value_objects import EventId, Money
from registrations.domain.value_objects import RegistrationId

TEAM_MIN_SIZE = 2
TEAM_MAX_SIZE = 4


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"


class TicketType(Enum):
    STANDARD = "Standard"
    PREMIUM = "Premium"
    VIP = "VIP"
    EARLY_BIRD = "Early Bird"


class PartyKind(Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


@dataclass(frozen=True)
class IndividualParty:
    """A single registrant holding one ticket."""

    ticket_type: TicketType = TicketType.STANDARD
    special_requirements: str = ""
    dietary: str = ""

    kind = PartyKind.INDIVIDUAL

    @property
    def size(self) -> int:
        return 1

    def party_key(self, registrant_id: str) -> str:
        return f"user:{registrant_id}"


@dataclass(frozen=True)
class TeamParty:
    """A named team entry, submitted with a roster and payment proof."""

    team_name: str
    members: tuple[str, ...]
    declared_size: int
    payment_proof_ref: str = ""
    paper_title: str = ""
    abstract: str = ""

    kind = PartyKind.TEAM

    @property
    def size(self) -> int:
        return self.declared_size

    @property
    def normalized_name(self) -> str:
        return self.team_name.strip()

    def party_key(self, registrant_id: str) -> str:
        return f"team:{self.normalized_name}"


Party = IndividualParty | TeamParty


@dataclass(frozen=True)
class Registration:
    """Domain representation of an admitted registration."""

    id: RegistrationId
    event_id: EventId
    registrant_id: str
    party_kind: PartyKind
    party_key: str
    party_size: int
    fee_total: Money
    is_last_minute: bool
    payment_status: PaymentStatus
    ticket_code: str
    registered_at: datetime
    name: str = ""
    email: str = ""
    department: str = ""
    ticket_type: TicketType = TicketType.STANDARD
    special_requirements: str = ""
    dietary: str = ""
    team_name: str = ""
    team_members: tuple[str, ...] = ()
    paper_title: str = ""
    abstract: str = ""
    payment_proof_ref: str | None = None
    checked_in_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.payment_status is not PaymentStatus.CANCELLED

    def is_owned_by(self, principal_id: str) -> bool:
        return self.registrant_id == principal_id


@dataclass(frozen=True)
class RegistrationPatch:
    """The display fields a registrant may still change. None means unchanged."""

    ticket_type: TicketType | None = None
    special_requirements: str | None = None
    dietary: str | None = None

    def changes(self) -> dict:
        return {
            name: value
            for name, value in (
                ("ticket_type", self.ticket_type),
                ("special_requirements", self.special_requirements),
                ("dietary", self.dietary),
            )
            if value is not None
        }
