"""Session models.

A ``Session`` is a bookable time slot with a fixed number of seats.
Seat counters are written only through the capacity coordinator, which
bumps ``version`` on every commit; ``SessionAttendee`` is the roster of
users holding a seat.
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator  # type: ignore
from django.db import models  # type: ignore


class Session(models.Model):
    """
    A bookable sports session.

    ``payment_status`` tracks the payout of the money collected for the
    whole session (held, then distributed to venue and coach). It never
    decides a refund: cancellation looks at the caller's own
    ``Booking.payment_status``.
    """

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        HELD = 'held', 'Held'
        DISTRIBUTED = 'distributed', 'Distributed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='organized_sessions',
    )
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField(null=True, blank=True)

    # Capacity
    max_attendees = models.PositiveIntegerField()
    current_attendees = models.PositiveIntegerField(default=0)
    waitlist_enabled = models.BooleanField(default=True)
    waitlist_count = models.PositiveIntegerField(default=0)

    # Policy
    cancellation_deadline_hours = models.PositiveIntegerField(default=24)
    refund_percentage = models.PositiveSmallIntegerField(
        default=100, validators=[MaxValueValidator(100)]
    )
    auto_promote_waitlist = models.BooleanField(default=True)

    # Financial
    price_cents = models.PositiveIntegerField(default=0)
    venue_cut_percent = models.PositiveSmallIntegerField(
        default=0, validators=[MaxValueValidator(100)]
    )
    coach_cut_percent = models.PositiveSmallIntegerField(
        default=100, validators=[MaxValueValidator(100)]
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )

    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['starts_at']
        indexes = [
            models.Index(fields=['starts_at'], name='session_starts_at_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_attendees__lte=models.F('max_attendees')),
                name='session_attendees_within_capacity',
            ),
            models.CheckConstraint(
                condition=models.Q(venue_cut_percent__lte=100) & models.Q(coach_cut_percent__lte=100),
                name='session_cut_percent_range',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} @ {self.starts_at:%Y-%m-%d %H:%M}"

    @property
    def is_full(self) -> bool:
        return self.current_attendees >= self.max_attendees

    @property
    def seats_left(self) -> int:
        return max(self.max_attendees - self.current_attendees, 0)


class SessionAttendee(models.Model):
    """Roster row: ``user`` holds a seat in ``session``."""

    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name='attendee_links')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='session_seats'
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(fields=['session', 'user'], name='unique_session_attendee'),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} in {self.session_id}"
