import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.errors import DomainError, ErrorCode

logger = logging.getLogger("turnstile.api")


ERROR_STATUS = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_REGISTRATION_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EVENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_CLOSED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PARTY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PARTY_SIZE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_PAYMENT_PROOF: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_REGISTRATION: status.HTTP_409_CONFLICT,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATUS_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.REGISTRATION_CANCELLED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_CHECKED_IN: status.HTTP_409_CONFLICT,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
}


def _error_response(status_code: int, errors) -> Response:
    return Response(
        {
            "success": False,
            "status_code": status_code,
            "errors": errors,
        },
        status=status_code,
    )


def custom_exception_handler(exc, context):
    """
    Wrap domain, DRF and Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    if isinstance(exc, DomainError):
        status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
        return _error_response(
            status_code,
            {"code": exc.code.value, "detail": exc.message},
        )

    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        wrapped = _error_response(response.status_code, response.data)
        for header in ("WWW-Authenticate", "Retry-After"):
            if header in response:
                wrapped[header] = response[header]
        return wrapped

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"detail": "Internal server error."},
    )
