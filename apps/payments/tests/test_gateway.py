"""Payment gateway client and the refund task."""

from unittest.mock import MagicMock, patch

import requests
from django.conf import settings
from django.test import SimpleTestCase, override_settings

from shared.domain.value_objects import Money
from apps.payments import gateway
from apps.payments.domain.pricing import split_payment
from apps.payments.gateway import PaymentGatewayError, Refund
from apps.payments.tasks import process_refund


def gateway_response(status_code: int, payload: dict) -> MagicMock:
    response = MagicMock(status_code=status_code, text=str(payload))
    response.json.return_value = payload
    return response


@override_settings(DEBUG=False, PAYMENT_GATEWAY_API_KEY="sk_test_123")
class GatewayClientTests(SimpleTestCase):
    @patch("apps.payments.gateway.requests.post")
    def test_create_payment_intent_posts_amount_fee_and_metadata(self, post) -> None:
        post.return_value = gateway_response(
            200, {"id": "pi_live", "client_secret": "pi_live_secret", "amount": 2000, "currency": "usd", "status": "requires_payment_method"}
        )

        result = gateway.create_payment_intent(
            amount_cents=2000, currency="usd", metadata={"bookingId": "b-1"}, application_fee_cents=130
        )

        self.assertEqual(result.id, "pi_live")
        self.assertEqual(result.client_secret, "pi_live_secret")
        args, kwargs = post.call_args
        self.assertTrue(args[0].endswith("/payment_intents"))
        self.assertEqual(kwargs["data"]["amount"], 2000)
        self.assertEqual(kwargs["data"]["application_fee_amount"], 130)
        self.assertEqual(kwargs["data"]["metadata[bookingId]"], "b-1")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk_test_123")
        self.assertEqual(kwargs["headers"]["Idempotency-Key"], "intent-b-1")

    @patch("apps.payments.gateway.requests.post")
    def test_error_status_raises(self, post) -> None:
        post.return_value = gateway_response(402, {"error": {"message": "card declined"}})

        with self.assertRaises(PaymentGatewayError) as ctx:
            gateway.refund_payment("pi_1")

        self.assertEqual(ctx.exception.status_code, 402)

    @patch("apps.payments.gateway.requests.post", side_effect=requests.exceptions.ConnectionError("down"))
    def test_network_error_raises(self, post) -> None:
        with self.assertRaises(PaymentGatewayError):
            gateway.refund_payment("pi_1")

    @patch("apps.payments.gateway.requests.post")
    def test_refund_uses_intent_as_idempotency_key(self, post) -> None:
        post.return_value = gateway_response(200, {"id": "re_1", "status": "pending"})

        refund = gateway.refund_payment("pi_1")

        self.assertEqual(refund, Refund(id="re_1", payment_intent_id="pi_1", status="pending"))
        self.assertEqual(post.call_args.kwargs["headers"]["Idempotency-Key"], "refund-pi_1")

    @override_settings(PAYMENT_GATEWAY_API_KEY="")
    @patch("apps.payments.gateway.requests.post")
    def test_without_api_key_calls_are_simulated(self, post) -> None:
        intent = gateway.create_payment_intent(amount_cents=500, currency="usd", metadata={})

        self.assertTrue(intent.id.startswith("pi_sim_"))
        self.assertEqual(gateway.refund_payment(intent.id).status, "succeeded")
        post.assert_not_called()


class RefundTaskTests(SimpleTestCase):
    @patch("apps.payments.tasks.gateway.refund_payment")
    def test_task_submits_refund(self, refund_payment) -> None:
        refund_payment.return_value = Refund(id="re_9", payment_intent_id="pi_9", status="pending")

        result = process_refund.delay("booking-9", "pi_9").get()

        self.assertEqual(result, {"booking_id": "booking-9", "refund_id": "re_9", "status": "pending"})
        refund_payment.assert_called_once_with("pi_9")

    def test_gateway_errors_are_retried(self) -> None:
        self.assertIn(PaymentGatewayError, process_refund.autoretry_for)
        self.assertEqual(process_refund.max_retries, settings.REFUND_TASK_MAX_RETRIES)


class PaymentSplitTests(SimpleTestCase):
    def test_split_between_platform_venue_and_coach(self) -> None:
        split = split_payment(Money(2000), venue_cut_percent=20, coach_cut_percent=80)

        self.assertEqual(split.as_dict(), {"total": 2000, "platform": 130, "venue": 374, "coach": 1496})
        self.assertEqual(split.net, Money(1870))

    def test_fee_never_exceeds_total(self) -> None:
        split = split_payment(Money(20), venue_cut_percent=50, coach_cut_percent=50)

        self.assertEqual(split.platform, Money(20))
        self.assertEqual(split.venue, Money(0))

    def test_percentages_are_validated(self) -> None:
        with self.assertRaises(ValueError):
            split_payment(Money(1000), venue_cut_percent=120, coach_cut_percent=0)
