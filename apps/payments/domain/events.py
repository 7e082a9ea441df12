"""
Inbound payment provider events.

Only the fields the booking core correlates on are modelled; the rest
of the provider payload stays in ``obj``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from uuid import UUID

from shared.domain.errors import InvalidArgumentError


class PaymentEventKind(Enum):
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    REFUNDED = 'refunded'


PROVIDER_EVENT_TYPES = {
    'payment_intent.succeeded': PaymentEventKind.SUCCEEDED,
    'payment_intent.payment_failed': PaymentEventKind.FAILED,
    'charge.refunded': PaymentEventKind.REFUNDED,
}


class MalformedPaymentEventError(InvalidArgumentError):
    """The webhook body is not a provider event."""


@dataclass(frozen=True)
class PaymentEvent:
    id: str
    type: str
    obj: dict = field(default_factory=dict)

    @property
    def kind(self) -> Optional[PaymentEventKind]:
        return PROVIDER_EVENT_TYPES.get(self.type)

    @property
    def payment_intent_id(self) -> str:
        if self.type.startswith('payment_intent.'):
            return str(self.obj.get('id') or '')
        return str(self.obj.get('payment_intent') or '')

    @property
    def booking_id(self) -> Optional[UUID]:
        metadata = self.obj.get('metadata')
        if not isinstance(metadata, dict):
            return None
        raw = metadata.get('bookingId') or metadata.get('booking_id')
        if not raw:
            return None
        try:
            return UUID(str(raw))
        except ValueError:
            return None


def parse_event(body: bytes) -> PaymentEvent:
    """
    Raises:
        MalformedPaymentEventError: invalid JSON, or ``type``/``data.object`` missing or of the wrong type
    """
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as e:
        raise MalformedPaymentEventError("Invalid JSON") from e

    if not isinstance(payload, dict):
        raise MalformedPaymentEventError("Event must be a JSON object")
    event_type = payload.get('type')
    data = payload.get('data')
    if not isinstance(event_type, str) or not event_type:
        raise MalformedPaymentEventError("Event type must be a non-empty string")
    if not isinstance(data, dict) or not isinstance(data.get('object'), dict):
        raise MalformedPaymentEventError("Event requires type and data.object")

    return PaymentEvent(id=str(payload.get('id') or ''), type=event_type, obj=data['object'])
