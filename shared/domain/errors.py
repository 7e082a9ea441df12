"""Domain error codes shared by all bounded contexts."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes, stable across the HTTP surface."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"
    CAPACITY_CONTENTION = "CAPACITY_CONTENTION"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class UnauthenticatedError(DomainError):
    def __init__(self, message: str = "Must be logged in") -> None:
        super().__init__(code=ErrorCode.UNAUTHENTICATED, message=message)


class NotFoundError(DomainError):
    """Raised when a referenced aggregate does not exist."""

    def __init__(self, resource: str, resource_id) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message=f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class FailedPreconditionError(DomainError):
    """Raised when the request is valid but the current state forbids it."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.FAILED_PRECONDITION, message=message)


class InvalidArgumentError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_ARGUMENT, message=message)


class CapacityContentionError(DomainError):
    """Raised when a capacity commit keeps losing to concurrent writers."""

    def __init__(self, session_id, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_CONTENTION,
            message="Session is busy, please retry",
        )
        self.session_id = session_id
        self.attempts = attempts
