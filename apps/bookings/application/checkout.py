"""
Checkout.

Opens a PENDING_PAYMENT booking for the caller and a payment intent at
the gateway. No seat is taken here: seats are only granted when the
payment-succeeded event arrives.
"""

from dataclasses import dataclass
from uuid import UUID
import logging

from django.conf import settings  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import FailedPreconditionError, NotFoundError, UnauthenticatedError
from shared.domain.value_objects import Money
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.events import BookingCreated
from apps.bookings.models import Booking as BookingModel
from apps.bookings.repositories import DjangoBookingRepository
from apps.payments import gateway
from apps.payments.domain.pricing import PaymentSplit, split_payment
from apps.sessions.domain.errors import AlreadyAttendingError, SessionFullError
from apps.sessions.models import Session, SessionAttendee

logger = logging.getLogger(__name__)


@dataclass
class StartCheckoutCommand:
    session_id: UUID
    user_id: int


@dataclass
class CheckoutResult:
    booking: BookingModel
    client_secret: str
    split: PaymentSplit


class StartCheckoutHandler:
    """
    Raises:
        UnauthenticatedError: no caller
        NotFoundError: unknown session
        SessionFullError / AlreadyAttendingError: nothing left to buy
        FailedPreconditionError: the session is free
        PaymentGatewayError: the intent could not be created
    """

    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: StartCheckoutCommand) -> CheckoutResult:
        if command.user_id is None:
            raise UnauthenticatedError()

        session = Session.objects.filter(pk=command.session_id).first()
        if session is None:
            raise NotFoundError('Session', command.session_id)
        if SessionAttendee.objects.filter(session=session, user_id=command.user_id).exists():
            raise AlreadyAttendingError(session.pk, command.user_id)
        if session.is_full:
            raise SessionFullError(session.pk)
        if session.price_cents == 0:
            raise FailedPreconditionError("Free sessions cannot be paid for")

        currency = settings.PAYMENT_CURRENCY
        split = split_payment(
            Money(session.price_cents, currency),
            venue_cut_percent=session.venue_cut_percent,
            coach_cut_percent=session.coach_cut_percent,
            platform_fee_percent=settings.PAYMENT_PLATFORM_FEE_PERCENT,
            platform_fee_fixed_cents=settings.PAYMENT_PLATFORM_FEE_FIXED_CENTS,
        )

        booking = Booking(
            session_id=session.pk,
            user_id=command.user_id,
            price_cents=session.price_cents,
            currency=currency,
        )
        with DjangoUnitOfWork() as uow:
            row = self.booking_repo.add(
                booking,
                platform_fee_cents=split.platform.cents,
                venue_amount_cents=split.venue.cents,
                coach_amount_cents=split.coach.cents,
            )
            uow.add_event(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                session_id=session.pk,
                user_id=command.user_id,
                price_cents=session.price_cents,
            ))

        # The booking row must exist before the gateway can send events for it.
        intent = gateway.create_payment_intent(
            amount_cents=split.total.cents,
            currency=currency,
            metadata={
                'bookingId': str(booking.id),
                'sessionId': str(session.pk),
                'userId': str(command.user_id),
            },
            application_fee_cents=split.platform.cents,
        )
        BookingModel.objects.filter(pk=booking.id).update(payment_intent_id=intent.id)
        row.payment_intent_id = intent.id

        logger.info(
            f"Checkout opened booking {row.booking_code} for session {session.pk}, "
            f"user {command.user_id}, intent {intent.id}"
        )
        return CheckoutResult(booking=row, client_secret=intent.client_secret, split=split)
