"""Cache keys for catalog reads."""

from django.conf import settings

EVENT_LIST_KEY = "events:list"


def event_detail_key(event_id) -> str:
    return f"events:{event_id}"


def cache_ttl() -> int:
    return getattr(settings, "EVENT_CACHE_TTL", 300)
