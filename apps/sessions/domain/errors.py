"""Errors raised by session capacity rules."""

from shared.domain.errors import FailedPreconditionError


class CapacityInvariantError(RuntimeError):
    """The aggregate reached a state that breaks its own invariants."""


class SessionFullError(FailedPreconditionError):
    def __init__(self, session_id) -> None:
        super().__init__("Session is full")
        self.session_id = session_id


class NotBookedError(FailedPreconditionError):
    def __init__(self, session_id, user_id) -> None:
        super().__init__("You are not booked for this session")
        self.session_id = session_id
        self.user_id = user_id


class AlreadyAttendingError(FailedPreconditionError):
    def __init__(self, session_id, user_id) -> None:
        super().__init__("You are already booked for this session")
        self.session_id = session_id
        self.user_id = user_id


class SessionNotFullError(FailedPreconditionError):
    def __init__(self, session_id) -> None:
        super().__init__("Session is not full, book directly")
        self.session_id = session_id


class WaitlistDisabledError(FailedPreconditionError):
    def __init__(self, session_id) -> None:
        super().__init__("Waitlist is not enabled for this session")
        self.session_id = session_id
