"""
Booking Domain Entities

- Booking: aggregate owning one user's seat purchase for a session
- BookingStatus: lifecycle states
- PaymentStatus: money-side state, moves independently of the lifecycle
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from shared.domain.base import Aggregate, utcnow


class BookingStatus(Enum):
    """
    Booking lifecycle

    State transitions:
    - PENDING_PAYMENT -> CONFIRMED (payment succeeded, seat available)
    - PENDING_PAYMENT -> FAILED_OVERBOOKED (payment succeeded, session full)
    - PENDING_PAYMENT -> FAILED_EVENT_NOT_FOUND (payment succeeded, session gone)
    - PENDING_PAYMENT -> FAILED_PAYMENT (payment failed)
    - CONFIRMED -> CANCELLED (user cancelled or payment refunded)
    """
    PENDING_PAYMENT = 'pending_payment'
    CONFIRMED = 'confirmed'
    FAILED_PAYMENT = 'failed_payment'
    FAILED_OVERBOOKED = 'failed_overbooked'
    FAILED_EVENT_NOT_FOUND = 'failed_event_not_found'
    CANCELLED = 'cancelled'


class PaymentStatus(Enum):
    UNPAID = 'unpaid'
    PAID = 'paid'
    PAID_PENDING_REFUND = 'paid_pending_refund'   # charged, no seat; refund owed
    REFUND_PENDING = 'refund_pending'             # refund requested at the gateway
    REFUNDED = 'refunded'


TRANSITIONS = {
    BookingStatus.PENDING_PAYMENT: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.FAILED_PAYMENT,
        BookingStatus.FAILED_OVERBOOKED,
        BookingStatus.FAILED_EVENT_NOT_FOUND,
    }),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
}

REFUNDABLE_PAYMENT_STATUSES = frozenset({
    PaymentStatus.PAID,
    PaymentStatus.PAID_PENDING_REFUND,
    PaymentStatus.REFUND_PENDING,
})


class InvalidTransitionError(ValueError):
    """A state change that the booking graph does not allow."""

    def __init__(self, booking_id, current, target):
        super().__init__(f"Booking {booking_id}: cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


@dataclass(eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - status only moves along TRANSITIONS, so a booking is confirmed at most once
    - a terminal booking never changes status again

    ``loaded_status`` and ``loaded_payment_status`` are the values the
    booking had when it was read; the repository only writes if the row
    still has them.
    """

    session_id: Optional[UUID]
    user_id: int
    price_cents: int = 0
    currency: str = 'usd'
    status: BookingStatus = BookingStatus.PENDING_PAYMENT
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_intent_id: str = ''
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    loaded_status: Optional[BookingStatus] = field(default=None, repr=False)
    loaded_payment_status: Optional[PaymentStatus] = field(default=None, repr=False)

    def __post_init__(self):
        if self.loaded_status is None:
            self.loaded_status = self.status
        if self.loaded_payment_status is None:
            self.loaded_payment_status = self.payment_status

    def mark_persisted(self):
        self.loaded_status = self.status
        self.loaded_payment_status = self.payment_status

    @property
    def is_pending(self) -> bool:
        return self.status == BookingStatus.PENDING_PAYMENT

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    @property
    def is_terminal(self) -> bool:
        return self.status not in TRANSITIONS

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in TRANSITIONS.get(self.status, ())

    def _transition(self, target: BookingStatus):
        if not self.can_transition_to(target):
            raise InvalidTransitionError(self.id, self.status, target)
        self.status = target

    def _remember_intent(self, payment_intent_id: str):
        if payment_intent_id:
            self.payment_intent_id = payment_intent_id

    def confirm(self, payment_intent_id: str = ''):
        """
        Payment succeeded and a seat was taken (PENDING_PAYMENT -> CONFIRMED)

        Events: BookingConfirmed
        """
        self._transition(BookingStatus.CONFIRMED)
        self.payment_status = PaymentStatus.PAID
        self.confirmed_at = utcnow()
        self._remember_intent(payment_intent_id)

        from apps.bookings.domain.events import BookingConfirmed

        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            session_id=self.session_id,
            user_id=self.user_id,
            payment_intent_id=self.payment_intent_id,
        ))

    def reject_overbooked(self, payment_intent_id: str = ''):
        """
        Payment succeeded but the session was full (PENDING_PAYMENT -> FAILED_OVERBOOKED)

        The charge stays with the gateway until refunded out of band.
        Events: BookingFailed
        """
        self._transition(BookingStatus.FAILED_OVERBOOKED)
        self.payment_status = PaymentStatus.PAID_PENDING_REFUND
        self._remember_intent(payment_intent_id)
        self._record_failure()

    def reject_session_missing(self, payment_intent_id: str = ''):
        """Payment succeeded for a session that no longer exists."""
        self._transition(BookingStatus.FAILED_EVENT_NOT_FOUND)
        self._remember_intent(payment_intent_id)
        self._record_failure()

    def fail_payment(self, payment_intent_id: str = ''):
        """Payment failed at the gateway (PENDING_PAYMENT -> FAILED_PAYMENT)"""
        self._transition(BookingStatus.FAILED_PAYMENT)
        self.payment_status = PaymentStatus.UNPAID
        self._remember_intent(payment_intent_id)
        self._record_failure()

    def cancel(self, refund_requested: bool = False):
        """
        Give up a confirmed booking (CONFIRMED -> CANCELLED)

        Events: BookingCancelled
        """
        self._transition(BookingStatus.CANCELLED)
        self.cancelled_at = utcnow()
        if refund_requested:
            self.payment_status = PaymentStatus.REFUND_PENDING

        from apps.bookings.domain.events import BookingCancelled

        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            session_id=self.session_id,
            user_id=self.user_id,
            refund_requested=refund_requested,
            payment_intent_id=self.payment_intent_id,
        ))

    @property
    def can_be_refunded(self) -> bool:
        return self.payment_status in REFUNDABLE_PAYMENT_STATUSES

    def mark_refunded(self):
        """
        The gateway reports the charge refunded.

        Only the payment side changes; callers cancel a confirmed booking
        first. Events: BookingRefunded
        """
        if not self.can_be_refunded:
            raise ValueError(
                f"Booking {self.id}: cannot refund from payment status {self.payment_status.value}"
            )
        self.payment_status = PaymentStatus.REFUNDED

        from apps.bookings.domain.events import BookingRefunded

        self.add_event(BookingRefunded(
            aggregate_id=self.id,
            booking_id=self.id,
            session_id=self.session_id,
            user_id=self.user_id,
            status=self.status.value,
        ))

    def _record_failure(self):
        from apps.bookings.domain.events import BookingFailed

        self.add_event(BookingFailed(
            aggregate_id=self.id,
            booking_id=self.id,
            session_id=self.session_id,
            user_id=self.user_id,
            status=self.status.value,
        ))
