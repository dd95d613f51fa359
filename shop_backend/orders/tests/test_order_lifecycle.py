# orders/tests/test_order_lifecycle.py

from django.test import SimpleTestCase

from core.exceptions import InvalidTransitionError, ValidationError
from orders.services import order_lifecycle as lifecycle


class OrderLifecycleRulesTests(SimpleTestCase):
    def test_payment_is_the_only_way_to_paid(self):
        self.assertTrue(
            lifecycle.can_transition(
                from_status=lifecycle.PENDING, to_status=lifecycle.PAID, source=lifecycle.PAYMENT
            )
        )
        self.assertFalse(
            lifecycle.can_transition(
                from_status=lifecycle.PENDING, to_status=lifecycle.PAID, source=lifecycle.ADMIN
            )
        )

    def test_pending_cannot_skip_to_shipped(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            lifecycle.validate_transition(
                from_status=lifecycle.PENDING, to_status=lifecycle.SHIPPED
            )
        self.assertIn("'pending' to 'shipped'", ctx.exception.message)

    def test_invalid_transition_is_a_validation_error(self):
        with self.assertRaises(ValidationError):
            lifecycle.validate_transition(
                from_status=lifecycle.DELIVERED, to_status=lifecycle.PROCESSING
            )

    def test_terminal_states_have_no_exits(self):
        for terminal in lifecycle.TERMINAL_STATES:
            self.assertEqual(lifecycle.next_statuses(from_status=terminal), [])
            with self.assertRaises(InvalidTransitionError):
                lifecycle.validate_transition(from_status=terminal, to_status=lifecycle.PAID)

    def test_delivery_signal_may_mark_delivered(self):
        lifecycle.validate_transition(
            from_status=lifecycle.SHIPPED,
            to_status=lifecycle.DELIVERED,
            source=lifecycle.DELIVERY,
        )

    def test_customer_may_only_request_refund(self):
        self.assertTrue(
            lifecycle.can_transition(
                from_status=lifecycle.DELIVERED,
                to_status=lifecycle.REFUND_REQUESTED,
                source=lifecycle.CUSTOMER,
            )
        )
        self.assertFalse(
            lifecycle.can_transition(
                from_status=lifecycle.REFUND_REQUESTED,
                to_status=lifecycle.REFUNDED,
                source=lifecycle.CUSTOMER,
            )
        )

    def test_unknown_source_rejected(self):
        with self.assertRaises(InvalidTransitionError):
            lifecycle.validate_transition(
                from_status=lifecycle.PAID, to_status=lifecycle.PROCESSING, source="robot"
            )

    def test_admin_next_statuses(self):
        self.assertEqual(
            lifecycle.next_statuses(from_status=lifecycle.PROCESSING),
            [lifecycle.AWAITING_INFO, lifecycle.CANCELLED, lifecycle.SHIPPED],
        )
        self.assertEqual(lifecycle.next_statuses(from_status=lifecycle.PENDING), [])
