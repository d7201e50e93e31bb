from django.urls import path

from registrations.handlers import (
    CheckInView,
    EventRegistrationDetailView,
    EventRegistrationListView,
    MyEventRegistrationView,
    MyRegistrationListView,
    PaymentProofUploadView,
    RegistrationDetailView,
    RegistrationPaymentStatusView,
)

urlpatterns = [
    path(
        "events/<str:event_id>/registrations",
        EventRegistrationListView.as_view(),
        name="event-registrations",
    ),
    path(
        "events/<str:event_id>/registrations/<str:registration_id>",
        EventRegistrationDetailView.as_view(),
        name="event-registration-detail",
    ),
    path("registrations/mine", MyRegistrationListView.as_view(), name="my-registrations"),
    path(
        "registrations/mine/<str:event_id>",
        MyEventRegistrationView.as_view(),
        name="my-event-registration",
    ),
    path(
        "registrations/check-in/<str:ticket_code>",
        CheckInView.as_view(),
        name="registration-check-in",
    ),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path(
        "registrations/<str:registration_id>/payment-status",
        RegistrationPaymentStatusView.as_view(),
        name="registration-payment-status",
    ),
    path("uploads/payment-proof", PaymentProofUploadView.as_view(), name="payment-proof-upload"),
]
