"""HTTP handlers (views) for registrations - HTTP concerns only.

Domain errors raised by the service are turned into responses by the API
exception handler (core.exceptions).
"""

import logging

from rest_framework import status
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.principal import principal_from_user
from events.stores.django_store import DjangoEventStore
from registrations.handlers.serializers import (
    PaymentProofUploadSerializer,
    PaymentStatusSerializer,
    RegistrationCreateSerializer,
    RegistrationPatchSerializer,
    RegistrationSerializer,
)
from registrations.services.registration_service import RegistrationService
from registrations.storage import payment_proof_url, store_payment_proof
from registrations.stores.django_store import DjangoRegistrationLedger

logger = logging.getLogger("turnstile.registrations")


def get_registration_service() -> RegistrationService:
    return RegistrationService(DjangoEventStore(), DjangoRegistrationLedger())


class EventRegistrationListView(APIView):
    """Handler for GET/POST /api/events/{event_id}/registrations"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        principal = principal_from_user(request.user)
        serializer = RegistrationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = get_registration_service().register(
            event_id,
            principal,
            serializer.to_party(),
            requested_last_minute=serializer.validated_data["last_minute"],
        )

        client_total = serializer.validated_data.get("total_fees")
        if client_total is not None and client_total != registration.fee_total.amount:
            logger.debug(
                "Ignored client-supplied total: registration=%s, client=%s, charged=%s",
                registration.id,
                client_total,
                registration.fee_total,
            )

        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)

    def get(self, request: Request, event_id: str) -> Response:
        principal = principal_from_user(request.user)
        registrations = get_registration_service().list_for_event(event_id, principal)

        paginator = LimitOffsetPagination()
        page = paginator.paginate_queryset(registrations, request, view=self)
        if page is None:
            return Response(RegistrationSerializer(registrations, many=True).data)
        return paginator.get_paginated_response(RegistrationSerializer(page, many=True).data)


class EventRegistrationDetailView(APIView):
    """Handler for DELETE /api/events/{event_id}/registrations/{registration_id}"""

    permission_classes = [IsAuthenticated]

    def delete(self, request: Request, event_id: str, registration_id: str) -> Response:
        principal = principal_from_user(request.user)
        get_registration_service().delete(registration_id, principal, event_id=event_id)
        return Response({"message": "Registration deleted successfully"})


class MyRegistrationListView(APIView):
    """Handler for GET /api/registrations/mine"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        principal = principal_from_user(request.user)
        registrations = get_registration_service().list_for_registrant(principal)
        return Response(RegistrationSerializer(registrations, many=True).data)


class MyEventRegistrationView(APIView):
    """Handler for GET /api/registrations/mine/{event_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, event_id: str) -> Response:
        principal = principal_from_user(request.user)
        registration = get_registration_service().get_for_registrant(event_id, principal)
        return Response(RegistrationSerializer(registration).data)


class RegistrationDetailView(APIView):
    """Handler for PATCH/DELETE /api/registrations/{registration_id}

    DELETE cancels; the record is kept with status Cancelled.
    """

    permission_classes = [IsAuthenticated]

    def patch(self, request: Request, registration_id: str) -> Response:
        principal = principal_from_user(request.user)
        serializer = RegistrationPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = get_registration_service().update(
            registration_id, principal, serializer.to_patch()
        )
        return Response(RegistrationSerializer(registration).data)

    def delete(self, request: Request, registration_id: str) -> Response:
        principal = principal_from_user(request.user)
        registration = get_registration_service().cancel(registration_id, principal)
        return Response(
            {
                "message": "Registration cancelled successfully",
                "registration": RegistrationSerializer(registration).data,
            }
        )


class RegistrationPaymentStatusView(APIView):
    """Handler for POST /api/registrations/{registration_id}/payment-status"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, registration_id: str) -> Response:
        principal = principal_from_user(request.user)
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = get_registration_service().set_payment_status(
            registration_id, principal, serializer.to_status()
        )
        return Response(RegistrationSerializer(registration).data)


class CheckInView(APIView):
    """Handler for POST /api/registrations/check-in/{ticket_code}"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, ticket_code: str) -> Response:
        principal = principal_from_user(request.user)
        registration = get_registration_service().check_in(ticket_code, principal)
        return Response(RegistrationSerializer(registration).data)


class PaymentProofUploadView(APIView):
    """Handler for POST /api/uploads/payment-proof"""

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request: Request) -> Response:
        principal = principal_from_user(request.user)
        serializer = PaymentProofUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reference = store_payment_proof(serializer.validated_data["file"], principal.id)
        return Response(
            {"reference": reference, "url": payment_proof_url(reference)},
            status=status.HTTP_201_CREATED,
        )
