"""Serializers for transforming event domain models to API responses."""

from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from events.services.event_service import EventDraft


def _default_capacity() -> int:
    return getattr(settings, "DEFAULT_EVENT_CAPACITY", 50)


def _default_multiplier() -> Decimal:
    return Decimal(str(getattr(settings, "DEFAULT_LAST_MINUTE_MULTIPLIER", "1.75")))


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    date = serializers.DateTimeField()
    time = serializers.CharField()
    location = serializers.CharField()
    base_fee = serializers.DecimalField(source="base_fee.amount", max_digits=10, decimal_places=2)
    capacity = serializers.IntegerField(source="capacity.value")
    last_minute_fee_multiplier = serializers.DecimalField(
        source="last_minute_fee_multiplier.value", max_digits=5, decimal_places=2
    )
    last_minute_pass_allowed = serializers.BooleanField()
    image_url = serializers.CharField()
    created_by = serializers.CharField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class EventWriteSerializer(serializers.Serializer):
    """Input for creating (full) or editing (partial) an event."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True)
    date = serializers.DateTimeField()
    time = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    image_url = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    base_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    capacity = serializers.IntegerField(min_value=1, default=_default_capacity)
    last_minute_fee_multiplier = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("1"),
        default=_default_multiplier,
    )
    last_minute_pass_allowed = serializers.BooleanField(default=True)

    def to_draft(self) -> EventDraft:
        return EventDraft(**self.validated_data)
