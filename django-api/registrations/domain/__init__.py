from registrations.domain.models import (
    IndividualParty,
    Party,
    PartyKind,
    PaymentStatus,
    Registration,
    RegistrationPatch,
    TeamParty,
    TicketType,
)
from registrations.domain.value_objects import RegistrationId

__all__ = [
    "Registration",
    "RegistrationId",
    "RegistrationPatch",
    "IndividualParty",
    "TeamParty",
    "Party",
    "PartyKind",
    "PaymentStatus",
    "TicketType",
]
