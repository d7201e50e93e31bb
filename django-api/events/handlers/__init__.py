from events.handlers.views import EventDetailView, EventListView

__all__ = ["EventListView", "EventDetailView"]
