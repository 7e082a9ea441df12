"""Waitlist models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore


class WaitlistEntry(models.Model):
    """
    A user queued for a seat in a full session.

    Entries are promoted strictly in ``joined_at`` order. A user has at
    most one entry per session; rejoining after a promotion or expiry
    reuses it with a fresh ``joined_at``.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PROMOTED = 'promoted', 'Promoted'
        EXPIRED = 'expired', 'Expired'

    session = models.ForeignKey(
        'play_sessions.Session', on_delete=models.CASCADE, related_name='waitlist_entries'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='waitlist_entries'
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    joined_at = models.DateTimeField(default=timezone.now)
    notification_sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['joined_at', 'id']
        indexes = [
            models.Index(fields=['session', 'status', 'joined_at'], name='waitlist_queue_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['session', 'user'], name='unique_waitlist_entry'),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} waiting for {self.session_id} ({self.status})"
