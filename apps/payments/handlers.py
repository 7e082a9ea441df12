"""Message bus subscriptions of the payments context."""

import logging

from apps.bookings.domain.events import BookingCancelled

logger = logging.getLogger(__name__)


def request_refund(event: BookingCancelled):
    """Queue the gateway refund for a cancellation that earned one."""
    if not event.refund_requested:
        return
    if not event.payment_intent_id:
        logger.error(f"Booking {event.booking_id} needs a refund but has no payment intent")
        return

    from apps.payments.tasks import process_refund

    process_refund.delay(str(event.booking_id), event.payment_intent_id)
    logger.info(f"Refund queued for booking {event.booking_id}")


def register_handlers(bus):
    bus.register_event_handler(BookingCancelled, request_refund)
