"""
Cancellation & refund evaluation.

A user gives up their seat in a session. The seat is always released;
a refund is requested only when the cancellation happens at least the
session's ``cancellation_deadline_hours`` before start and the user's
booking is paid. The refund itself is executed after commit by the
refund task and never blocks or undoes the seat release.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID
import logging

from django.utils import timezone  # type: ignore

from shared.domain.errors import NotFoundError, UnauthenticatedError
from apps.bookings.domain.entities import PaymentStatus
from apps.bookings.repositories import DjangoBookingRepository
from apps.sessions.application.coordinator import CapacityCoordinator
from apps.sessions.domain.capacity import ReleaseReason
from apps.sessions.domain.errors import NotBookedError

logger = logging.getLogger(__name__)

REFUND_INITIATED = 'Booking cancelled. Refund initiated.'
NO_REFUND_LATE = 'Booking cancelled. No refund based on policy.'
NOTHING_TO_REFUND = 'Booking cancelled. Nothing to refund.'


@dataclass
class CancelSessionBookingCommand:
    session_id: UUID
    user_id: Optional[int]


@dataclass(frozen=True)
class CancellationResult:
    success: bool
    refund_processed: bool
    message: str

    def as_dict(self) -> dict:
        return {
            'success': self.success,
            'refund_processed': self.refund_processed,
            'message': self.message,
        }


class CancelSessionBookingHandler:
    """
    Release the caller's seat and decide on a refund.

    Raises:
        UnauthenticatedError: no caller
        NotFoundError: the session does not exist
        NotBookedError: the caller holds no seat in the session
    """

    def __init__(self, booking_repo=None, coordinator=None, clock=timezone.now):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.coordinator = coordinator or CapacityCoordinator()
        self.clock = clock

    def handle(self, command: CancelSessionBookingCommand) -> CancellationResult:
        if command.user_id is None:
            raise UnauthenticatedError()

        def cancel(uow, sessions) -> CancellationResult:
            capacity = sessions.get(command.session_id)
            if capacity is None:
                raise NotFoundError('Session', command.session_id)
            if not capacity.has_attendee(command.user_id):
                raise NotBookedError(command.session_id, command.user_id)

            in_window = capacity.refund_window_open(self.clock())
            booking = self.booking_repo.get_confirmed(command.session_id, command.user_id)
            refund = bool(
                in_window
                and booking is not None
                and booking.payment_status == PaymentStatus.PAID
                and booking.payment_intent_id
            )

            capacity.release(command.user_id, ReleaseReason.CANCELLED)
            uow.collect_events(capacity)
            sessions.save(capacity)

            if booking is not None:
                booking.cancel(refund_requested=refund)
                uow.collect_events(booking)
                self.booking_repo.save(booking)

            if refund:
                message = REFUND_INITIATED
            elif in_window:
                message = NOTHING_TO_REFUND
            else:
                message = NO_REFUND_LATE
            return CancellationResult(success=True, refund_processed=refund, message=message)

        result = self.coordinator.run(cancel, session_id=command.session_id)
        logger.info(
            f"User {command.user_id} cancelled seat in session {command.session_id}, "
            f"refund_processed={result.refund_processed}"
        )
        return result
