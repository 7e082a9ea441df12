"""
Message bus subscriptions of the notifications context.

Each handler runs after the transaction that produced the event has
committed. Delivery is best effort: a failed notification is logged and
never affects the booking or waitlist state.
"""

import logging
from typing import Optional
from uuid import UUID

from apps.bookings.domain.events import BookingConfirmed, BookingFailed, BookingRefunded
from apps.waitlist.domain.events import WaitlistPromoted

from .models import Notification
from .services import notify_user

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TITLE = 'Your Session'
# A missing session is an operator problem, the user is not told about it.
NOTIFIED_FAILURES = {'failed_payment', 'failed_overbooked'}


def session_title(session_id: Optional[UUID]) -> str:
    from apps.sessions.models import Session

    if session_id is None:
        return DEFAULT_SESSION_TITLE
    title = Session.objects.filter(pk=session_id).values_list('title', flat=True).first()
    return title or DEFAULT_SESSION_TITLE


def on_booking_confirmed(event: BookingConfirmed):
    notify_user(
        event.user_id,
        Notification.Type.BOOKING_CONFIRMED,
        'Booking Confirmed!',
        f"You are locked in for {session_title(event.session_id)}.",
        related_id=str(event.booking_id),
        link='/profile',
    )


def on_booking_failed(event: BookingFailed):
    if event.status not in NOTIFIED_FAILURES:
        return
    notify_user(
        event.user_id,
        Notification.Type.BOOKING_FAILED,
        'Booking Failed',
        f"Your booking for {session_title(event.session_id)} could not be completed.",
        related_id=str(event.booking_id),
        link='/explore',
    )


def on_booking_refunded(event: BookingRefunded):
    title = session_title(event.session_id)
    if event.status == "cancelled":
        message = f"Your booking for {title} has been cancelled and refunded."
    else:
        message = f"Your payment for {title} has been refunded."
    notify_user(
        event.user_id,
        Notification.Type.BOOKING_REFUNDED,
        "Booking Refunded",
        message,
        related_id=str(event.booking_id),
        link='/profile',
    )


def on_waitlist_promoted(event: WaitlistPromoted):
    notify_user(
        event.user_id,
        Notification.Type.WAITLIST_PROMOTED,
        "You're in!",
        f"A spot opened up and you have been added to {session_title(event.session_id)}.",
        related_id=str(event.session_id),
        link=f"/sessions/{event.session_id}",
    )


def register_handlers(bus):
    bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    bus.register_event_handler(BookingFailed, on_booking_failed)
    bus.register_event_handler(BookingRefunded, on_booking_refunded)
    bus.register_event_handler(WaitlistPromoted, on_waitlist_promoted)
