"""Serializers for registration requests and responses.

Request bodies are parsed into the typed party variants here; the service
never sees raw request data.
"""

from django.conf import settings
from rest_framework import serializers

from registrations.domain import (
    IndividualParty,
    Party,
    PartyKind,
    PaymentStatus,
    RegistrationPatch,
    TeamParty,
    TicketType,
)

TICKET_TYPE_CHOICES = [ticket.value for ticket in TicketType]
PAYMENT_STATUS_CHOICES = [status.value for status in PaymentStatus]
PARTY_KIND_CHOICES = [kind.value for kind in PartyKind]

IMMUTABLE_FIELDS = frozenset(
    {
        "id",
        "event",
        "event_id",
        "registrant",
        "registrant_id",
        "party_key",
        "party_kind",
        "party_size",
        "team_name",
        "members",
        "team_members",
        "fee_total",
        "total_fees",
        "is_last_minute",
        "payment_status",
        "ticket_code",
        "registered_at",
    }
)

PAYMENT_PROOF_CONTENT_TYPES = ("application/pdf", "image/png", "image/jpeg")


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    registrant_id = serializers.CharField()
    party_kind = serializers.CharField(source="party_kind.value")
    party_key = serializers.CharField()
    party_size = serializers.IntegerField()
    name = serializers.CharField()
    email = serializers.CharField()
    department = serializers.CharField()
    ticket_type = serializers.CharField(source="ticket_type.value")
    special_requirements = serializers.CharField()
    dietary = serializers.CharField()
    team_name = serializers.CharField()
    team_members = serializers.ListField(child=serializers.CharField())
    paper_title = serializers.CharField()
    abstract = serializers.CharField()
    fee_total = serializers.DecimalField(source="fee_total.amount", max_digits=12, decimal_places=2)
    is_last_minute = serializers.BooleanField()
    payment_status = serializers.CharField(source="payment_status.value")
    payment_proof_ref = serializers.CharField(allow_null=True)
    ticket_code = serializers.CharField()
    registered_at = serializers.DateTimeField()
    checked_in_at = serializers.DateTimeField(allow_null=True)


class RegistrationCreateSerializer(serializers.Serializer):
    """Body of POST /events/{event_id}/registrations.

    ``total_fees`` is accepted for compatibility with older clients and is
    never used as the charge.
    """

    type = serializers.ChoiceField(choices=PARTY_KIND_CHOICES, default=PartyKind.INDIVIDUAL.value)
    last_minute = serializers.BooleanField(default=False)
    total_fees = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)

    ticket_type = serializers.ChoiceField(choices=TICKET_TYPE_CHOICES, default=TicketType.STANDARD.value)
    special_requirements = serializers.CharField(required=False, allow_blank=True, default="")
    dietary = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    team_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    members = serializers.ListField(
        child=serializers.CharField(max_length=255),
        required=False,
        default=list,
    )
    team_size = serializers.IntegerField(required=False)
    payment_proof_ref = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    paper_title = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    abstract = serializers.CharField(required=False, allow_blank=True, default="")

    def to_party(self) -> Party:
        data = self.validated_data
        if data["type"] == PartyKind.TEAM.value:
            members = tuple(data["members"])
            return TeamParty(
                team_name=data["team_name"],
                members=members,
                declared_size=data.get("team_size", len(members)),
                payment_proof_ref=data["payment_proof_ref"],
                paper_title=data["paper_title"],
                abstract=data["abstract"],
            )
        return IndividualParty(
            ticket_type=TicketType(data["ticket_type"]),
            special_requirements=data["special_requirements"],
            dietary=data["dietary"],
        )


class RegistrationPatchSerializer(serializers.Serializer):
    """Body of PATCH /registrations/{id}. Only display fields may change."""

    ticket_type = serializers.ChoiceField(choices=TICKET_TYPE_CHOICES, required=False)
    special_requirements = serializers.CharField(required=False, allow_blank=True)
    dietary = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        immutable = sorted(IMMUTABLE_FIELDS.intersection(self.initial_data))
        if immutable:
            raise serializers.ValidationError(
                {name: "This field cannot be changed." for name in immutable}
            )
        return attrs

    def to_patch(self) -> RegistrationPatch:
        data = self.validated_data
        ticket_type = data.get("ticket_type")
        return RegistrationPatch(
            ticket_type=TicketType(ticket_type) if ticket_type else None,
            special_requirements=data.get("special_requirements"),
            dietary=data.get("dietary"),
        )


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PAYMENT_STATUS_CHOICES)

    def to_status(self) -> PaymentStatus:
        return PaymentStatus(self.validated_data["status"])


class PaymentProofUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, upload):
        limit = getattr(settings, "PAYMENT_PROOF_MAX_BYTES", 5 * 1024 * 1024)
        if upload.size > limit:
            raise serializers.ValidationError(f"File exceeds {limit} bytes.")
        content_type = getattr(upload, "content_type", "")
        if content_type not in PAYMENT_PROOF_CONTENT_TYPES:
            raise serializers.ValidationError("Payment proof must be a PDF, PNG or JPEG file.")
        return upload
