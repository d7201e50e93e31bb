"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models

UNIQUE_ACTIVE_PARTY = "unique_active_party_per_event"


class Registration(models.Model):
    """Persistence model for registrations."""

    STATUS_PENDING = "Pending"
    STATUS_PAID = "Paid"
    STATUS_CANCELLED = "Cancelled"
    STATUS_REFUNDED = "Refunded"

    STATUS_CHOICES = (
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REFUNDED, "Refunded"),
    )

    TICKET_CHOICES = (
        ("Standard", "Standard"),
        ("Premium", "Premium"),
        ("VIP", "VIP"),
        ("Early Bird", "Early Bird"),
    )

    KIND_CHOICES = (
        ("individual", "Individual"),
        ("team", "Team"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        "events.Event", on_delete=models.CASCADE, related_name="registrations"
    )
    registrant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="registrations",
    )
    party_kind = models.CharField(max_length=20, choices=KIND_CHOICES, default="individual")
    party_key = models.CharField(max_length=255)
    party_size = models.PositiveSmallIntegerField(default=1)

    # Registrant snapshot at admission time
    name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    department = models.CharField(max_length=120, blank=True, default="")

    ticket_type = models.CharField(max_length=20, choices=TICKET_CHOICES, default="Standard")
    special_requirements = models.TextField(blank=True, default="")
    dietary = models.CharField(max_length=255, blank=True, default="")

    team_name = models.CharField(max_length=255, blank=True, default="")
    team_members = models.JSONField(default=list, blank=True)
    paper_title = models.CharField(max_length=255, blank=True, default="")
    abstract = models.TextField(blank=True, default="")

    fee_total = models.DecimalField(max_digits=12, decimal_places=2)
    is_last_minute = models.BooleanField(default=False)
    payment_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_proof_ref = models.CharField(max_length=500, blank=True, null=True)

    ticket_code = models.CharField(max_length=20, db_index=True, editable=False)
    registered_at = models.DateTimeField()
    checked_in_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-registered_at"]
        indexes = [
            models.Index(fields=["event", "payment_status"], name="registration_event_status_idx"),
            models.Index(fields=["registrant", "-registered_at"], name="registration_registrant_idx"),
        ]
        constraints = [
            # One active registration per party and event; cancelled rows don't count.
            models.UniqueConstraint(
                fields=["event", "party_key"],
                condition=~models.Q(payment_status="Cancelled"),
                name=UNIQUE_ACTIVE_PARTY,
            ),
        ]

    def __str__(self) -> str:
        return f"{self.party_key} @ {self.event_id} ({self.payment_status})"
