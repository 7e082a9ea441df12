"""
Payment Event Ingestor

Turns a verified provider event into a booking command and records it
in the processed-event ledger. Signature checking happens in the view,
before anything here runs.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from apps.bookings.application.command_handlers import (
    ConfirmBookingPaymentCommand,
    FailBookingPaymentCommand,
    RefundBookingPaymentCommand,
)
from apps.payments.domain.events import PaymentEvent, PaymentEventKind
from apps.payments.models import ProcessedPaymentEvent

logger = logging.getLogger(__name__)

DUPLICATE = 'duplicate'
UNHANDLED_TYPE = 'unhandled_type'
UNCORRELATED = 'uncorrelated'


@dataclass(frozen=True)
class IngestResult:
    event_id: str
    outcome: str
    dispatched: bool


class PaymentEventIngestor:
    """
    Dispatch provider events to the booking state machine.

    Order of work:
    1. Already in the ledger -> acknowledge, no dispatch
    2. Unknown type or no booking correlation -> acknowledge, record
    3. Dispatch the command; its outcome is recorded in the ledger

    The ledger row is written after the command has committed. If the
    process dies in between, the redelivered event is dispatched again,
    which every handler tolerates.
    """

    def __init__(self, bus=None):
        if bus is None:
            from shared.application.message_bus import message_bus as bus
        self.bus = bus

    def ingest(self, event: PaymentEvent) -> IngestResult:
        if event.id and ProcessedPaymentEvent.objects.filter(event_id=event.id).exists():
            logger.info(f"Payment event {event.id} already processed, skipping")
            return IngestResult(event.id, DUPLICATE, dispatched=False)

        command = self._command_for(event)
        if command is None:
            outcome = UNHANDLED_TYPE if event.kind is None else UNCORRELATED
            logger.warning(f"Payment event {event.id} ({event.type}) not dispatched: {outcome}")
            self._record(event, outcome)
            return IngestResult(event.id, outcome, dispatched=False)

        outcome = self.bus.handle_command(command).value
        self._record(event, outcome)
        return IngestResult(event.id, outcome, dispatched=True)

    def _command_for(self, event: PaymentEvent):
        kind = event.kind
        booking_id = event.booking_id
        intent_id = event.payment_intent_id

        if kind == PaymentEventKind.SUCCEEDED and booking_id:
            return ConfirmBookingPaymentCommand(booking_id=booking_id, payment_intent_id=intent_id)
        if kind == PaymentEventKind.FAILED and booking_id:
            return FailBookingPaymentCommand(booking_id=booking_id, payment_intent_id=intent_id)
        if kind == PaymentEventKind.REFUNDED and (booking_id or intent_id):
            return RefundBookingPaymentCommand(booking_id=booking_id, payment_intent_id=intent_id)
        return None

    @staticmethod
    def _record(event: PaymentEvent, outcome: str) -> Optional[ProcessedPaymentEvent]:
        if not event.id:
            return None
        entry, _ = ProcessedPaymentEvent.objects.get_or_create(
            event_id=event.id,
            defaults={
                'event_type': event.type,
                'booking_id': event.booking_id,
                'payment_intent_id': event.payment_intent_id,
                'outcome': outcome,
            },
        )
        return entry
