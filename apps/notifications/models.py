"""Notification model.

A notification is written for a user when something happens to one of
their bookings or waitlist entries. Notifications are consumed through
the API and can be marked as read.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING_CONFIRMED = "booking_confirmed", _("Booking confirmed")
        BOOKING_FAILED = "booking_failed", _("Booking failed")
        BOOKING_REFUNDED = "booking_refunded", _("Booking refunded")
        WAITLIST_PROMOTED = "waitlist_promoted", _("Promoted from waitlist")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications'
    )
    type = models.CharField(max_length=32, choices=Type.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    related_id = models.CharField(max_length=64, blank=True)
    link = models.CharField(max_length=255, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read'], name='notification_unread_idx')]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"
