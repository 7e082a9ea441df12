"""Domain errors rendered as HTTP responses."""

from rest_framework import exceptions

from shared.domain.errors import (
    CapacityContentionError,
    FailedPreconditionError,
    NotFoundError,
    UnauthenticatedError,
)
from shared.interfaces.exception_handler import domain_exception_handler


def test_domain_errors_map_to_status_and_body():
    cases = [
        (UnauthenticatedError(), 401, "UNAUTHENTICATED"),
        (NotFoundError("Session", "abc"), 404, "NOT_FOUND"),
        (FailedPreconditionError("Session is full"), 400, "FAILED_PRECONDITION"),
        (CapacityContentionError("abc", 5), 503, "CAPACITY_CONTENTION"),
    ]
    for error, status_code, code in cases:
        response = domain_exception_handler(error, {})
        assert response.status_code == status_code
        assert response.data == {"code": code, "message": error.message}


def test_not_authenticated_uses_domain_body():
    response = domain_exception_handler(exceptions.NotAuthenticated(), {})

    assert response.status_code == 401
    assert response.data["code"] == "UNAUTHENTICATED"


def test_unknown_exceptions_are_left_to_django():
    assert domain_exception_handler(RuntimeError("boom"), {}) is None
