from registrations.handlers.views import (
    CheckInView,
    EventRegistrationDetailView,
    EventRegistrationListView,
    MyEventRegistrationView,
    MyRegistrationListView,
    PaymentProofUploadView,
    RegistrationDetailView,
    RegistrationPaymentStatusView,
)

__all__ = [
    "EventRegistrationListView",
    "EventRegistrationDetailView",
    "MyRegistrationListView",
    "MyEventRegistrationView",
    "RegistrationDetailView",
    "RegistrationPaymentStatusView",
    "CheckInView",
    "PaymentProofUploadView",
]
