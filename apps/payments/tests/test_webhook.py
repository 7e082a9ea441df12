"""Payment webhook: signature check, dispatch and duplicate suppression."""

from __future__ import annotations

import json
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.urls import reverse

from shared.application.message_bus import message_bus
from shared.domain.errors import CapacityContentionError
from apps.bookings.models import Booking
from apps.payments.models import ProcessedPaymentEvent
from apps.payments.signatures import SIGNATURE_HEADER, sign_payload
from apps.sessions.tests.factories import make_booking, make_session, make_user, paid_booking

SECRET = "whsec_test"


def event(event_id: str, event_type: str, obj: dict) -> dict:
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


class PaymentWebhookTests(TestCase):
    def setUp(self) -> None:
        self.url = reverse("payment-webhook")
        self.player = make_user("player")
        self.session = make_session(max_attendees=1)
        self.booking = make_booking(self.session, self.player)

    def _post(self, payload, *, secret: str = SECRET, signature: str | None = None):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        if signature is None:
            signature = sign_payload(body, secret)
        return self.client.post(
            self.url,
            data=body,
            content_type="application/json",
            headers={SIGNATURE_HEADER: signature},
        )

    def _succeeded(self, event_id: str = "evt_1", booking=None) -> dict:
        booking = booking or self.booking
        return event(
            event_id,
            "payment_intent.succeeded",
            {"id": "pi_1", "metadata": {"bookingId": str(booking.pk)}},
        )

    def test_success_confirms_booking(self) -> None:
        response = self._post(self._succeeded())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"received": True})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.payment_intent_id, "pi_1")
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 1)
        ledger = ProcessedPaymentEvent.objects.get(event_id="evt_1")
        self.assertEqual(ledger.outcome, "confirmed")
        self.assertEqual(ledger.booking_id, self.booking.pk)

    def test_bad_signature_is_rejected_before_any_change(self) -> None:
        response = self._post(self._succeeded(), signature="sha256=" + "0" * 64)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid signature"})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING_PAYMENT)
        self.assertFalse(ProcessedPaymentEvent.objects.exists())

    def test_signature_from_another_secret_is_rejected(self) -> None:
        response = self._post(self._succeeded(), secret="whsec_other")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.session.current_attendees, 0)

    def test_missing_signature_is_rejected(self) -> None:
        response = self._post(self._succeeded(), signature="")

        self.assertEqual(response.status_code, 400)

    @override_settings(PAYMENT_WEBHOOK_SECRET="")
    def test_unconfigured_secret_rejects_everything(self) -> None:
        response = self._post(self._succeeded())

        self.assertEqual(response.status_code, 400)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING_PAYMENT)

    def test_malformed_body(self) -> None:
        response = self._post(b"{not json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid JSON"})

        response = self._post({"id": "evt_2", "type": "payment_intent.succeeded"})
        self.assertEqual(response.status_code, 400)

        response = self._post({"id": "evt_3", "type": 123, "data": {"object": {}}})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(ProcessedPaymentEvent.objects.exists())

    def test_duplicate_event_is_not_dispatched_again(self) -> None:
        self._post(self._succeeded("evt_dup"))

        with patch.object(message_bus, "handle_command") as handle_command:
            response = self._post(self._succeeded("evt_dup"))

        self.assertEqual(response.status_code, 200)
        handle_command.assert_not_called()
        self.assertEqual(ProcessedPaymentEvent.objects.filter(event_id="evt_dup").count(), 1)
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 1)

    def test_same_payment_under_new_event_id_is_idempotent(self) -> None:
        self._post(self._succeeded("evt_a"))
        response = self._post(self._succeeded("evt_b"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(ProcessedPaymentEvent.objects.get(event_id="evt_b").outcome, "already_processed")
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 1)

    def test_payment_after_session_filled_is_overbooked(self) -> None:
        rival = make_booking(self.session, make_user("rival"))
        self._post(self._succeeded("evt_rival", booking=rival))

        response = self._post(self._succeeded("evt_late"))

        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.FAILED_OVERBOOKED)
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID_PENDING_REFUND)
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 1)

    def test_failed_payment(self) -> None:
        payload = event(
            "evt_f",
            "payment_intent.payment_failed",
            {"id": "pi_1", "metadata": {"bookingId": str(self.booking.pk)}},
        )

        self._post(payload)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.FAILED_PAYMENT)

    def test_charge_refunded_correlates_by_payment_intent(self) -> None:
        self.booking.delete()
        booking = paid_booking(self.session, self.player, payment_intent_id="pi_paid")

        response = self._post(event("evt_r", "charge.refunded", {"id": "ch_1", "payment_intent": "pi_paid"}))

        self.assertEqual(response.status_code, 200)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.REFUNDED)
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 0)
        self.assertEqual(
            ProcessedPaymentEvent.objects.get(event_id="evt_r").outcome, "seat_released_and_refunded"
        )

    def test_unhandled_type_is_acknowledged(self) -> None:
        response = self._post(event("evt_u", "customer.created", {"id": "cus_1"}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(ProcessedPaymentEvent.objects.get(event_id="evt_u").outcome, "unhandled_type")

    def test_event_without_booking_is_acknowledged(self) -> None:
        response = self._post(event("evt_n", "payment_intent.succeeded", {"id": "pi_9", "metadata": {}}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(ProcessedPaymentEvent.objects.get(event_id="evt_n").outcome, "uncorrelated")

    def test_metadata_that_is_not_an_object_is_uncorrelated(self) -> None:
        response = self._post(event("evt_m", "payment_intent.succeeded", {"id": "pi_1", "metadata": "x"}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(ProcessedPaymentEvent.objects.get(event_id="evt_m").outcome, "uncorrelated")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING_PAYMENT)

    def test_contention_asks_provider_to_redeliver(self) -> None:
        with patch(
            "apps.payments.views.PaymentEventIngestor.ingest",
            side_effect=CapacityContentionError(self.session.pk, 5),
        ):
            response = self._post(self._succeeded("evt_busy"))

        self.assertEqual(response.status_code, 500)
        self.assertFalse(ProcessedPaymentEvent.objects.filter(event_id="evt_busy").exists())

    def test_get_is_not_allowed(self) -> None:
        self.assertEqual(self.client.get(self.url).status_code, 405)
