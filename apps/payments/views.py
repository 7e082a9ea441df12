"""Payment provider webhook endpoint."""

import structlog
from django.conf import settings  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.http import JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore

from shared.domain.errors import CapacityContentionError
from apps.payments.application.ingestor import PaymentEventIngestor
from apps.payments.domain.events import MalformedPaymentEventError, parse_event
from apps.payments.signatures import SIGNATURE_HEADER, verify_signature

logger = structlog.get_logger(__name__)


@csrf_exempt
@require_POST
def payment_webhook(request):
    """
    Receive a payment provider event.

    400 before any mutation when the signature or body is invalid;
    200 ``{"received": true}`` once the event is dispatched, whatever the
    business outcome; 500 when processing failed and the provider should
    redeliver.
    """
    log = logger.bind(path=request.path)

    secret = settings.PAYMENT_WEBHOOK_SECRET
    if not secret:
        log.error("payment_webhook.secret_missing")
        return JsonResponse({"error": "Webhook secret not configured"}, status=400)

    if not verify_signature(request.body, request.headers.get(SIGNATURE_HEADER, ""), secret):
        log.warning("payment_webhook.bad_signature")
        return JsonResponse({"error": "Invalid signature"}, status=400)

    try:
        event = parse_event(request.body)
    except MalformedPaymentEventError as exc:
        log.warning("payment_webhook.malformed", error=exc.message)
        return JsonResponse({"error": exc.message}, status=400)

    log = log.bind(event_id=event.id, event_type=event.type)
    try:
        result = PaymentEventIngestor().ingest(event)
    except (CapacityContentionError, DatabaseError) as exc:
        log.error("payment_webhook.failed", error=str(exc), exc_info=True)
        return JsonResponse({"error": "Internal error"}, status=500)

    log.info("payment_webhook.processed", outcome=result.outcome, dispatched=result.dispatched)
    return JsonResponse({"received": True})
