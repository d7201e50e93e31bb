from django.contrib import admin

from events.models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "date", "location", "base_fee", "capacity", "created_by"]
    search_fields = ["title", "location"]
    list_filter = ["last_minute_pass_allowed"]
