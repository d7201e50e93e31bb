"""
Payment status state machine for registrations.

Pending → Paid → Refunded
   │        │
   └────────┴──→ Cancelled

Cancelled and Refunded are terminal. Any transition not in
VALID_TRANSITIONS is rejected.
"""

from registrations.domain.models import PaymentStatus

INITIAL_STATUS = PaymentStatus.PENDING

VALID_TRANSITIONS = {
    PaymentStatus.PENDING: (PaymentStatus.PAID, PaymentStatus.CANCELLED),
    PaymentStatus.PAID: (PaymentStatus.REFUNDED, PaymentStatus.CANCELLED),
    PaymentStatus.CANCELLED: (),
    PaymentStatus.REFUNDED: (),
}


def can_transition(current: PaymentStatus, new_status: PaymentStatus) -> tuple[bool, str]:
    """
    Check if a registration can move from one payment status to another.

    Returns (can_transition: bool, reason: str)
    """
    if new_status not in VALID_TRANSITIONS.get(current, ()):
        return False, f"Cannot transition from '{current.value}' to '{new_status.value}'"
    return True, ""


def is_terminal_status(status: PaymentStatus) -> bool:
    return not VALID_TRANSITIONS.get(status)
