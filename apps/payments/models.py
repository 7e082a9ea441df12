"""Payment models.

``ProcessedPaymentEvent`` is the ledger of provider events that have
been dispatched. The provider redelivers events until it receives a
2xx, so the ledger is what turns at-least-once delivery into a single
dispatch in the common case.
"""

from __future__ import annotations

from django.db import models  # type: ignore


class ProcessedPaymentEvent(models.Model):
    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    booking_id = models.UUIDField(null=True, blank=True, db_index=True)
    payment_intent_id = models.CharField(max_length=255, blank=True)
    outcome = models.CharField(max_length=50)
    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-processed_at']

    def __str__(self) -> str:
        return f"{self.event_type} {self.event_id}: {self.outcome}"
