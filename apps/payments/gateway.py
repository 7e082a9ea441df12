"""
Payment gateway client.

Thin HTTP client for the card processor: payment intents at checkout,
refunds after cancellation. Amounts travel in cents. When ``DEBUG`` is
on or no API key is configured, calls are simulated locally so the
booking flow can run end to end without a processor account.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings  # type: ignore

from shared.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)


class PaymentGatewayError(DomainError):
    """The processor rejected the call or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(code=ErrorCode.PAYMENT_GATEWAY_ERROR, message=message)
        self.status_code = status_code


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount_cents: int
    currency: str
    status: str


@dataclass(frozen=True)
class Refund:
    id: str
    payment_intent_id: str
    status: str


def _simulated() -> bool:
    return settings.DEBUG or not settings.PAYMENT_GATEWAY_API_KEY


def _post(path: str, data: dict, idempotency_key: str) -> dict:
    url = f"{settings.PAYMENT_GATEWAY_BASE_URL.rstrip('/')}/{path}"
    headers = {
        "Authorization": f"Bearer {settings.PAYMENT_GATEWAY_API_KEY}",
        "Idempotency-Key": idempotency_key,
        "Accept": "application/json",
    }
    try:
        response = requests.post(
            url,
            data=data,
            headers=headers,
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Network error calling payment gateway {path}: {e}")
        raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e

    if response.status_code not in (200, 201):
        logger.error(f"Payment gateway {path} failed: {response.status_code} - {response.text}")
        raise PaymentGatewayError(
            f"Payment gateway returned {response.status_code}", status_code=response.status_code
        )
    return response.json()


def create_payment_intent(
    amount_cents: int,
    currency: str,
    metadata: dict,
    application_fee_cents: int = 0,
) -> PaymentIntent:
    """
    Open a payment intent for ``amount_cents``.

    ``metadata`` is echoed back on every webhook event for the intent;
    it must carry ``bookingId`` so the ingestor can correlate events.
    """
    booking_id = metadata.get("bookingId", "")
    logger.info(f"Creating payment intent for booking {booking_id}: {amount_cents} {currency}")

    if _simulated():
        intent_id = f"pi_sim_{uuid.uuid4().hex[:16]}"
        logger.warning("Payment gateway simulated (DEBUG or no API key)")
        return PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:8]}",
            amount_cents=amount_cents,
            currency=currency,
            status="requires_payment_method",
        )

    payload = {
        "amount": amount_cents,
        "currency": currency,
        "automatic_payment_methods[enabled]": "true",
    }
    if application_fee_cents:
        payload["application_fee_amount"] = application_fee_cents
    for key, value in metadata.items():
        payload[f"metadata[{key}]"] = value

    result = _post("payment_intents", payload, idempotency_key=f"intent-{booking_id}")
    return PaymentIntent(
        id=result["id"],
        client_secret=result.get("client_secret", ""),
        amount_cents=result.get("amount", amount_cents),
        currency=result.get("currency", currency),
        status=result.get("status", ""),
    )


def refund_payment(payment_intent_id: str, reason: str = "requested_by_customer") -> Refund:
    """
    Refund the full charge behind ``payment_intent_id``.

    The idempotency key is derived from the intent, so retrying a refund
    that already went through returns the original refund.
    """
    if _simulated():
        logger.info(f"Simulating refund for payment {payment_intent_id}")
        return Refund(id=f"re_sim_{payment_intent_id}", payment_intent_id=payment_intent_id, status="succeeded")

    result = _post(
        "refunds",
        {"payment_intent": payment_intent_id, "reason": reason},
        idempotency_key=f"refund-{payment_intent_id}",
    )
    logger.info(f"Refund {result.get('id')} created for payment {payment_intent_id}")
    return Refund(id=result["id"], payment_intent_id=payment_intent_id, status=result.get("status", ""))
