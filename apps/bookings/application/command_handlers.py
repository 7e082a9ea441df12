"""
Booking Command Handlers

Use cases driven by payment events. Each handler runs one unit of work
through the capacity coordinator, so a conflicting concurrent commit on
the same session or booking makes it start over from a fresh read.

Commands:
- ConfirmBookingPaymentCommand: payment succeeded
- FailBookingPaymentCommand: payment failed
- RefundBookingPaymentCommand: charge refunded at the gateway

Every handler is idempotent: replaying a command against a booking that
already moved past the state it expects returns ALREADY_PROCESSED.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID
import logging

from apps.bookings.domain.entities import Booking, PaymentStatus
from apps.bookings.repositories import DjangoBookingRepository
from apps.sessions.application.coordinator import CapacityCoordinator
from apps.sessions.domain.capacity import ReleaseReason

logger = logging.getLogger(__name__)


class PaymentOutcome(Enum):
    CONFIRMED = 'confirmed'
    OVERBOOKED = 'overbooked'
    SESSION_NOT_FOUND = 'session_not_found'
    PAYMENT_FAILED = 'payment_failed'
    SEAT_RELEASED_AND_REFUNDED = 'seat_released_and_refunded'
    REFUNDED = 'refunded'
    ALREADY_PROCESSED = 'already_processed'
    BOOKING_NOT_FOUND = 'booking_not_found'
    IGNORED = 'ignored'


# ===== Commands =====

@dataclass
class ConfirmBookingPaymentCommand:
    booking_id: UUID
    payment_intent_id: str = ''


@dataclass
class FailBookingPaymentCommand:
    booking_id: UUID
    payment_intent_id: str = ''


@dataclass
class RefundBookingPaymentCommand:
    """Either ``booking_id`` or ``payment_intent_id`` identifies the booking."""
    booking_id: Optional[UUID] = None
    payment_intent_id: str = ''


# ===== Command Handlers =====

class ConfirmBookingPaymentHandler:
    """
    Payment succeeded: take a seat or record why not.

    Steps, inside one unit of work:
    1. Load the booking; only PENDING_PAYMENT bookings are processed
    2. Load the session capacity snapshot
    3. Session gone -> FAILED_EVENT_NOT_FOUND
    4. Session full (or the user already holds a seat) -> FAILED_OVERBOOKED,
       the charge is owed back (PAID_PENDING_REFUND)
    5. Otherwise admit the user and confirm the booking
    6. Conditional commit of session and booking together

    Of N payments racing for K seats, the version check lets exactly K
    commits admit; the others retry, see a full session and fail.
    """

    def __init__(self, booking_repo=None, coordinator=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.coordinator = coordinator or CapacityCoordinator()

    def handle(self, command: ConfirmBookingPaymentCommand) -> PaymentOutcome:
        def confirm(uow, sessions) -> PaymentOutcome:
            booking = self.booking_repo.get(command.booking_id)
            if booking is None:
                logger.warning(f"Payment succeeded for unknown booking {command.booking_id}")
                return PaymentOutcome.BOOKING_NOT_FOUND
            if not booking.is_pending:
                logger.info(
                    f"Booking {booking.id} already {booking.status.value}, ignoring payment success"
                )
                return PaymentOutcome.ALREADY_PROCESSED

            capacity = sessions.get(booking.session_id) if booking.session_id else None
            if capacity is None:
                booking.reject_session_missing(command.payment_intent_id)
                outcome = PaymentOutcome.SESSION_NOT_FOUND
            elif capacity.is_full or capacity.has_attendee(booking.user_id):
                booking.reject_overbooked(command.payment_intent_id)
                outcome = PaymentOutcome.OVERBOOKED
            else:
                capacity.admit(booking.user_id)
                booking.confirm(command.payment_intent_id)
                uow.collect_events(capacity)
                sessions.save(capacity)
                outcome = PaymentOutcome.CONFIRMED

            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return outcome

        outcome = self.coordinator.run(confirm)
        logger.info(f"Payment success for booking {command.booking_id}: {outcome.value}")
        return outcome


class FailBookingPaymentHandler:
    """Payment failed: PENDING_PAYMENT -> FAILED_PAYMENT, nothing else changes."""

    def __init__(self, booking_repo=None, coordinator=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.coordinator = coordinator or CapacityCoordinator()

    def handle(self, command: FailBookingPaymentCommand) -> PaymentOutcome:
        def fail(uow, sessions) -> PaymentOutcome:
            booking = self.booking_repo.get(command.booking_id)
            if booking is None:
                logger.warning(f"Payment failed for unknown booking {command.booking_id}")
                return PaymentOutcome.BOOKING_NOT_FOUND
            if not booking.is_pending:
                return PaymentOutcome.ALREADY_PROCESSED

            booking.fail_payment(command.payment_intent_id)
            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return PaymentOutcome.PAYMENT_FAILED

        outcome = self.coordinator.run(fail)
        logger.info(f"Payment failure for booking {command.booking_id}: {outcome.value}")
        return outcome


class RefundBookingPaymentHandler:
    """
    Charge refunded at the gateway.

    - CONFIRMED booking: release the seat, cancel, mark refunded
    - CANCELLED or FAILED_OVERBOOKED booking still owed money: mark refunded only,
      the seat was released earlier or never taken
    - already refunded, or nothing was paid: no-op
    """

    def __init__(self, booking_repo=None, coordinator=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.coordinator = coordinator or CapacityCoordinator()

    def _load(self, command: RefundBookingPaymentCommand) -> Optional[Booking]:
        booking = self.booking_repo.get(command.booking_id) if command.booking_id else None
        if booking is None:
            booking = self.booking_repo.get_by_payment_intent(command.payment_intent_id)
        return booking

    def handle(self, command: RefundBookingPaymentCommand) -> PaymentOutcome:
        def refund(uow, sessions) -> PaymentOutcome:
            booking = self._load(command)
            if booking is None:
                logger.warning(
                    f"Refund for unknown booking {command.booking_id or command.payment_intent_id}"
                )
                return PaymentOutcome.BOOKING_NOT_FOUND
            if booking.payment_status == PaymentStatus.REFUNDED:
                return PaymentOutcome.ALREADY_PROCESSED

            if booking.is_confirmed:
                capacity = sessions.get(booking.session_id) if booking.session_id else None
                if capacity is not None and capacity.has_attendee(booking.user_id):
                    capacity.release(booking.user_id, ReleaseReason.REFUNDED)
                    uow.collect_events(capacity)
                    sessions.save(capacity)
                booking.cancel(refund_requested=False)
                booking.mark_refunded()
                outcome = PaymentOutcome.SEAT_RELEASED_AND_REFUNDED
            elif booking.can_be_refunded:
                booking.mark_refunded()
                outcome = PaymentOutcome.REFUNDED
            else:
                logger.info(
                    f"Refund event for booking {booking.id} in {booking.status.value}/"
                    f"{booking.payment_status.value}, nothing to do"
                )
                return PaymentOutcome.IGNORED

            uow.collect_events(booking)
            self.booking_repo.save(booking)
            return outcome

        outcome = self.coordinator.run(refund)
        logger.info(f"Refund for booking {command.booking_id or command.payment_intent_id}: {outcome.value}")
        return outcome
