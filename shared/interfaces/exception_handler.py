"""
REST exception handling.

Maps domain errors to HTTP responses with a stable body::

    {"code": "FAILED_PRECONDITION", "message": "Not booked for this session"}

Internal details never reach the response; DRF's own exceptions keep
their default rendering except authentication failures, which use the
same body so clients can switch on ``code``.
"""

import logging

from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FAILED_PRECONDITION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_GATEWAY_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.CAPACITY_CONTENTION: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(code: ErrorCode, message: str) -> dict:
    return {"code": code.value, "message": message}


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        http_status = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if http_status >= 500:
            logger.error(f"Request failed with {exc}")
        return Response(error_body(exc.code, exc.message), status=http_status)

    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = error_body(ErrorCode.UNAUTHENTICATED, str(exc.detail))
    return response
