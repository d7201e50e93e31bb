"""Domain primitives for registrations."""

import secrets
import string
from dataclasses import dataclass
from typing import Self
from uuid import UUID, uuid4

TICKET_ALPHABET = string.ascii_uppercase + string.digits
TICKET_TOKEN_LENGTH = 6
TICKET_ID_SUFFIX_LENGTH = 6


@dataclass(frozen=True)
class RegistrationId:
    """Unique identifier for a Registration."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


def new_ticket_code(registration_id: RegistrationId) -> str:
    """Short random token joined to the tail of the record id, e.g. ``K3ZQ9A-1F0C2B``."""
    token = "".join(secrets.choice(TICKET_ALPHABET) for _ in range(TICKET_TOKEN_LENGTH))
    suffix = registration_id.value.hex[-TICKET_ID_SUFFIX_LENGTH:].upper()
    return f"{token}-{suffix}"
