from django.contrib import admin

from registrations.models import Registration


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = [
        "ticket_code",
        "event",
        "party_key",
        "party_size",
        "fee_total",
        "is_last_minute",
        "payment_status",
        "registered_at",
    ]
    list_filter = ["payment_status", "party_kind", "is_last_minute", "event"]
    search_fields = ["ticket_code", "party_key", "name", "email", "team_name"]
    readonly_fields = ["ticket_code", "fee_total", "party_key", "registered_at"]
