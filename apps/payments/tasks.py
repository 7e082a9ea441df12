"""Background payment work."""

import logging

from celery import shared_task
from django.conf import settings  # type: ignore

from apps.payments import gateway
from apps.payments.gateway import PaymentGatewayError

logger = logging.getLogger(__name__)


@shared_task(
    name="payments.process_refund",
    autoretry_for=(PaymentGatewayError,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=settings.REFUND_TASK_MAX_RETRIES,
)
def process_refund(booking_id: str, payment_intent_id: str) -> dict:
    """
    Ask the gateway to refund a cancelled booking's charge.

    The booking stays ``refund_pending`` until the gateway's
    ``charge.refunded`` event arrives; this task only submits the refund.
    Gateway errors are retried with exponential backoff, and the seat
    release that requested the refund is never undone.
    """
    refund = gateway.refund_payment(payment_intent_id)
    logger.info(f"Refund {refund.id} submitted for booking {booking_id} ({refund.status})")
    return {"booking_id": booking_id, "refund_id": refund.id, "status": refund.status}
