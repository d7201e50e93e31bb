import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "party_kind",
                    models.CharField(
                        choices=[("individual", "Individual"), ("team", "Team")],
                        default="individual",
                        max_length=20,
                    ),
                ),
                ("party_key", models.CharField(max_length=255)),
                ("party_size", models.PositiveSmallIntegerField(default=1)),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("department", models.CharField(blank=True, default="", max_length=120)),
                (
                    "ticket_type",
                    models.CharField(
                        choices=[
                            ("Standard", "Standard"),
                            ("Premium", "Premium"),
                            ("VIP", "VIP"),
                            ("Early Bird", "Early Bird"),
                        ],
                        default="Standard",
                        max_length=20,
                    ),
                ),
                ("special_requirements", models.TextField(blank=True, default="")),
                ("dietary", models.CharField(blank=True, default="", max_length=255)),
                ("team_name", models.CharField(blank=True, default="", max_length=255)),
                ("team_members", models.JSONField(blank=True, default=list)),
                ("paper_title", models.CharField(blank=True, default="", max_length=255)),
                ("abstract", models.TextField(blank=True, default="")),
                ("fee_total", models.DecimalField(decimal_places=2, max_digits=12)),
                ("is_last_minute", models.BooleanField(default=False)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Paid", "Paid"),
                            ("Cancelled", "Cancelled"),
                            ("Refunded", "Refunded"),
                        ],
                        default="Pending",
                        max_length=20,
                    ),
                ),
                ("payment_proof_ref", models.CharField(blank=True, max_length=500, null=True)),
                ("ticket_code", models.CharField(db_index=True, editable=False, max_length=20)),
                ("registered_at", models.DateTimeField()),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.event",
                    ),
                ),
                (
                    "registrant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-registered_at"],
                "indexes": [
                    models.Index(fields=["event", "payment_status"], name="registration_event_status_idx"),
                    models.Index(fields=["registrant", "-registered_at"], name="registration_registrant_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("payment_status", "Cancelled"), _negated=True),
                        fields=("event", "party_key"),
                        name="unique_active_party_per_event",
                    ),
                ],
            },
        ),
    ]
