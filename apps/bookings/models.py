"""Booking models.

One ``Booking`` per checkout. Rows are never deleted: a booking that did
not end in a seat keeps its failed status as the audit trail of what
happened to the payment.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import timedelta

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class BookingQuerySet(models.QuerySet):
    def awaiting_refund(self) -> "BookingQuerySet":
        """Paid bookings that ended without a seat and still owe the charge back."""
        return self.filter(
            status=Booking.Status.FAILED_OVERBOOKED,
            payment_status=Booking.PaymentStatus.PAID_PENDING_REFUND,
        )

    def stalled_refunds(self, older_than: timedelta) -> "BookingQuerySet":
        """Cancellations whose refund was requested but never confirmed by the gateway."""
        return self.filter(
            status=Booking.Status.CANCELLED,
            payment_status=Booking.PaymentStatus.REFUND_PENDING,
            cancelled_at__lte=timezone.now() - older_than,
        )


class Booking(models.Model):
    """A user's paid or pending seat purchase for a session."""

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", _("Pending payment")
        CONFIRMED = "confirmed", _("Confirmed")
        FAILED_PAYMENT = "failed_payment", _("Payment failed")
        FAILED_OVERBOOKED = "failed_overbooked", _("Overbooked")
        FAILED_EVENT_NOT_FOUND = "failed_event_not_found", _("Session not found")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", _("Unpaid")
        PAID = "paid", _("Paid")
        PAID_PENDING_REFUND = "paid_pending_refund", _("Paid, refund owed")
        REFUND_PENDING = "refund_pending", _("Refund requested")
        REFUNDED = "refunded", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    session = models.ForeignKey(
        "play_sessions.Session",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING_PAYMENT,
    )
    payment_status = models.CharField(
        max_length=32,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)
    price_cents = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="usd")
    platform_fee_cents = models.PositiveIntegerField(default=0)
    venue_amount_cents = models.PositiveIntegerField(default=0)
    coach_amount_cents = models.PositiveIntegerField(default=0)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["session", "status"], name="bookings_bo_session_3c1b2e_idx"),
            models.Index(fields=["user", "status"], name="bookings_bo_user_id_8f2a4d_idx"),
            models.Index(fields=["payment_status"], name="bookings_bo_payment_5e7c91_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for {self.session_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_code:
            self.booking_code = self.generate_booking_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_code() -> str:
        return secrets.token_hex(4).upper()
