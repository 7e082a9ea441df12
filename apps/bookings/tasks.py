"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.db.models import Sum  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)


def _summarise(bookings, label: str) -> tuple[int, int]:
    count = bookings.count()
    amount = bookings.aggregate(amount_total=Sum("price_cents"))["amount_total"] or 0
    if count:
        codes = list(bookings.values_list("booking_code", flat=True)[:20])
        logger.warning(f"{count} {label} ({amount} cents): {', '.join(codes)}")
    return count, amount


@shared_task(name="bookings.report_overbooked_refunds")
def report_overbooked_refunds() -> dict[str, int]:
    """
    Report paid bookings whose money has not gone back yet.

    Two backlogs are reconciled by an operator at the gateway:
    - overbooked bookings, never refunded automatically
    - cancellations whose refund was requested more than
      ``REFUND_STALLED_AFTER_HOURS`` ago and never confirmed, typically
      because ``process_refund`` ran out of retries

    Once a refund goes through, the ``charge.refunded`` event marks the
    booking refunded and it drops out of both.

    Runs hourly.

    Returns:
        dict: counts and owed amounts of both backlogs
    """
    pending, amount = _summarise(
        Booking.objects.awaiting_refund(), "overbooked bookings awaiting refund"
    )
    stalled, stalled_amount = _summarise(
        Booking.objects.stalled_refunds(timedelta(hours=settings.REFUND_STALLED_AFTER_HOURS)),
        "cancelled bookings with a stalled refund",
    )
    return {
        "pending": pending,
        "amount_cents": amount,
        "stalled": stalled,
        "stalled_amount_cents": stalled_amount,
    }
