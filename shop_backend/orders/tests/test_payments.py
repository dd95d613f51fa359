# orders/tests/test_payments.py

import json
import time
from unittest import mock

from django.core import mail
from django.db import OperationalError
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from orders.models import OrderStatusEvent, PaymentEvent
from orders.services import order_lifecycle as lifecycle
from orders.services.payments import process_payment_event
from orders.services.stripe import compute_signature, verify_stripe_signature
from orders.tests.test_order_transitions import make_order

WEBHOOK_URL = "/api/payments/webhook/"
SECRET = "whsec_test_layered"


def intent_event(order, *, event_id="evt_1", event_type="payment_intent.succeeded", amount=11500, **intent):
    obj = {
        "id": order.payment_intent_id,
        "object": "payment_intent",
        "amount": amount,
        "amount_received": amount,
        "currency": "pln",
        "metadata": {"order_id": str(order.id), "order_no": order.order_no},
    }
    obj.update(intent)
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


def signed_header(body: bytes, *, secret=SECRET, timestamp=None) -> str:
    ts = str(timestamp if timestamp is not None else int(time.time()))
    return f"t={ts},v1={compute_signature(payload=body, timestamp=ts, secret=secret)}"


class SignatureVerificationTests(SimpleTestCase):
    body = b'{"id": "evt_1"}'

    def test_valid_signature(self):
        self.assertTrue(verify_stripe_signature(payload=self.body, header=signed_header(self.body)))

    def test_wrong_secret_rejected(self):
        header = signed_header(self.body, secret="whsec_other")
        self.assertFalse(verify_stripe_signature(payload=self.body, header=header))

    def test_tampered_body_rejected(self):
        header = signed_header(self.body)
        self.assertFalse(verify_stripe_signature(payload=b'{"id": "evt_2"}', header=header))

    def test_stale_timestamp_rejected(self):
        header = signed_header(self.body, timestamp=int(time.time()) - 3600)
        self.assertFalse(verify_stripe_signature(payload=self.body, header=header))

    def test_missing_or_garbled_header_rejected(self):
        self.assertFalse(verify_stripe_signature(payload=self.body, header=None))
        self.assertFalse(verify_stripe_signature(payload=self.body, header="v1=abc"))

    def test_any_matching_v1_signature_accepted(self):
        ts = str(int(time.time()))
        good = compute_signature(payload=self.body, timestamp=ts, secret=SECRET)
        header = f"t={ts},v1=deadbeef,v1={good}"
        self.assertTrue(verify_stripe_signature(payload=self.body, header=header))


class PaymentEventProcessingTests(TestCase):
    def setUp(self):
        self.order = make_order(payment_intent_id="pi_123")

    def test_succeeded_marks_order_paid(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = process_payment_event(intent_event(self.order))

        self.assertEqual(result.outcome, PaymentEvent.OUTCOME_CONFIRMED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PAID)
        self.assertIsNotNone(self.order.paid_at)

        event = OrderStatusEvent.objects.get(order=self.order)
        self.assertEqual(event.source, lifecycle.PAYMENT)

    def test_amount_mismatch_leaves_order_pending(self):
        result = process_payment_event(intent_event(self.order, amount=100))

        self.assertEqual(result.outcome, PaymentEvent.OUTCOME_FAILED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PENDING)

    def test_currency_mismatch_leaves_order_pending(self):
        result = process_payment_event(intent_event(self.order, currency="eur"))

        self.assertEqual(result.outcome, PaymentEvent.OUTCOME_FAILED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PENDING)

    def test_payment_failed_recorded_order_stays_pending(self):
        event = intent_event(
            self.order,
            event_type="payment_intent.payment_failed",
            last_payment_error={"message": "Card declined"},
        )
        result = process_payment_event(event)

        self.assertEqual(result.outcome, PaymentEvent.OUTCOME_FAILED)
        self.assertEqual(result.detail, "Card declined")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PENDING)

        record = PaymentEvent.objects.get(event_id="evt_1")
        self.assertEqual(record.order, self.order)

    def test_order_found_by_metadata_when_intent_id_unknown(self):
        event = intent_event(self.order)
        event["data"]["object"]["id"] = "pi_other"
        process_payment_event(event)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PAID)

    def test_unknown_intent_ignored(self):
        event = intent_event(self.order, metadata={})
        event["data"]["object"]["id"] = "pi_unknown"
        result = process_payment_event(event)

        self.assertEqual(result.outcome, PaymentEvent.OUTCOME_IGNORED)
        self.assertEqual(result.detail, "Unknown payment intent")

    def test_second_event_for_paid_order_ignored(self):
        with self.captureOnCommitCallbacks(execute=True):
            process_payment_event(intent_event(self.order, event_id="evt_1"))
            result = process_payment_event(intent_event(self.order, event_id="evt_2"))

        self.assertEqual(result.outcome, PaymentEvent.OUTCOME_IGNORED)
        self.assertEqual(OrderStatusEvent.objects.filter(order=self.order).count(), 1)
        self.assertEqual(len(mail.outbox), 1)


class StripeWebhookApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.order = make_order(payment_intent_id="pi_123")

    def _post(self, event, *, header=None):
        body = json.dumps(event).encode("utf-8")
        return self.client.post(
            WEBHOOK_URL,
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=header if header is not None else signed_header(body),
        )

    def test_bad_signature_400(self):
        res = self._post(intent_event(self.order), header="t=1,v1=bad")
        self.assertEqual(res.status_code, 400)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PENDING)
        self.assertFalse(PaymentEvent.objects.exists())

    def test_replayed_event_applies_once(self):
        event = intent_event(self.order)

        with self.captureOnCommitCallbacks(execute=True):
            first = self._post(event)
        with self.captureOnCommitCallbacks(execute=True):
            second = self._post(event)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.data["outcome"], PaymentEvent.OUTCOME_CONFIRMED)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(second.data["detail"], "Duplicate event")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PAID)
        self.assertEqual(
            OrderStatusEvent.objects.filter(order=self.order, to_status=lifecycle.PAID).count(), 1
        )
        self.assertEqual(PaymentEvent.objects.filter(event_id="evt_1").count(), 1)

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.order.order_no, mail.outbox[0].subject)
        self.assertIn("115.00", mail.outbox[0].body)

    def test_unhandled_event_type_acknowledged(self):
        event = intent_event(self.order, event_type="charge.refunded")
        res = self._post(event)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["outcome"], PaymentEvent.OUTCOME_IGNORED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PENDING)

    def test_signed_non_json_body_acknowledged(self):
        body = b"not json"
        res = self.client.post(
            WEBHOOK_URL,
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signed_header(body),
        )
        self.assertEqual(res.status_code, 200)
        self.assertFalse(PaymentEvent.objects.exists())

    def test_unexpected_error_answers_500_and_redelivery_applies(self):
        event = intent_event(self.order, event_id="evt_retry")

        with mock.patch(
            "orders.services.payments.transition_order",
            side_effect=OperationalError("database is locked"),
        ):
            res = self._post(event)

        self.assertEqual(res.status_code, 500)
        self.assertFalse(res.data["ok"])
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PENDING)
        self.assertFalse(PaymentEvent.objects.filter(event_id="evt_retry").exists())

        res = self._post(event)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["outcome"], PaymentEvent.OUTCOME_CONFIRMED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, lifecycle.PAID)
