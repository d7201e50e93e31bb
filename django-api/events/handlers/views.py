"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Let domain errors reach the API exception handler for HTTP mapping
- Never contain business logic
- Never expose internal error details
"""

from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.principal import principal_from_user
from events.cache import EVENT_LIST_KEY, cache_ttl, event_detail_key
from events.handlers.serializers import EventSerializer, EventWriteSerializer
from events.services.event_service import EventService, parse_event_id
from events.stores.django_store import DjangoEventStore


def get_event_service() -> EventService:
    return EventService(DjangoEventStore())


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request: Request) -> Response:
        data = cache.get(EVENT_LIST_KEY)
        if data is None:
            events = get_event_service().list_events()
            data = EventSerializer(events, many=True).data
            cache.set(EVENT_LIST_KEY, data, cache_ttl())
        return Response(data)

    def post(self, request: Request) -> Response:
        principal = principal_from_user(request.user)
        serializer = EventWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = get_event_service().create_event(principal, serializer.to_draft())
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request: Request, event_id: str) -> Response:
        key = event_detail_key(parse_event_id(event_id))
        data = cache.get(key)
        if data is None:
            event = get_event_service().get_event(event_id)
            data = EventSerializer(event).data
            cache.set(key, data, cache_ttl())
        return Response(data)

    def patch(self, request: Request, event_id: str) -> Response:
        principal = principal_from_user(request.user)
        serializer = EventWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        event = get_event_service().update_event(
            event_id, principal, dict(serializer.validated_data)
        )
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        principal = principal_from_user(request.user)
        get_event_service().delete_event(event_id, principal)
        return Response({"message": "Event removed"})
