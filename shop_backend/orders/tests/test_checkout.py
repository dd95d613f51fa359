# orders/tests/test_checkout.py

from decimal import Decimal
from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Product
from core.exceptions import PaymentGatewayError
from orders.models import Order

CHECKOUT_URL = "/api/checkout/create-payment-intent/"

MATERIAL_SCHEMA = {
    "options": [
        {
            "id": "material",
            "type": "material",
            "label": "Materiał",
            "required": True,
            "priceType": "add",
            "materialOptions": [
                {"name": "PLA", "code": "pla"},
                {"name": "PETG", "code": "petg", "priceModifier": 15},
            ],
        }
    ],
    "nonRefundable": True,
    "nonRefundableReason": "Produkt na zamówienie",
}

FAKE_INTENT = {
    "id": "pi_test_1",
    "client_secret": "pi_test_1_secret_abc",
    "amount": 45700,
    "currency": "pln",
    "status": "requires_payment_method",
}


@mock.patch("orders.services.checkout.create_payment_intent", return_value=FAKE_INTENT)
class CheckoutApiTests(TestCase):
    """
    GUARANTEES:
    - lines are priced from the catalog, never from the request
    - Order.total = items, delivery_cost separate, intent = grand_total
    - gateway failure leaves no order behind
    """

    def setUp(self):
        self.client = APIClient()
        self.vase = Product.objects.create(name="Wazon Spiral", price=Decimal("89.00"))
        self.lamp = Product.objects.create(
            name="Lampa Voronoi", price=Decimal("249.00"), customization=MATERIAL_SCHEMA
        )

    def _payload(self, **overrides):
        payload = {
            "items": [
                {"product_id": str(self.vase.id), "quantity": 2},
                {
                    "product_id": str(self.lamp.id),
                    "quantity": 1,
                    "customizations": [
                        {
                            "optionId": "material",
                            "selectedMaterial": {"name": "PETG", "priceModifier": 999},
                        }
                    ],
                    "non_refundable_accepted": True,
                },
            ],
            "customer_email": "anna@example.com",
            "customer_name": "Anna Nowak",
            "delivery_method": "inpost_locker",
            "delivery_details": {"locker_id": "KRA01M"},
        }
        payload.update(overrides)
        return payload

    def test_order_totals_and_intent_amount(self, create_intent):
        res = self.client.post(CHECKOUT_URL, self._payload(), format="json")

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["client_secret"], "pi_test_1_secret_abc")
        self.assertEqual(res.data["total"], "442.00")
        self.assertEqual(res.data["delivery_cost"], "15.00")
        self.assertEqual(res.data["grand_total"], "457.00")

        order = Order.objects.get(id=res.data["order_id"])
        self.assertEqual(order.total, Decimal("442.00"))
        self.assertEqual(order.delivery_cost, Decimal("15.00"))
        self.assertEqual(order.grand_total, Decimal("457.00"))
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_intent_id, "pi_test_1")
        self.assertTrue(order.has_non_refundable)

        kwargs = create_intent.call_args.kwargs
        self.assertEqual(kwargs["amount"], Decimal("457.00"))
        self.assertEqual(kwargs["currency"], "pln")
        self.assertEqual(kwargs["metadata"]["order_id"], str(order.id))
        self.assertEqual(kwargs["idempotency_key"], f"order-{order.id}")

    def test_item_snapshot_is_server_priced(self, create_intent):
        res = self.client.post(CHECKOUT_URL, self._payload(), format="json")
        order = Order.objects.get(id=res.data["order_id"])

        lamp = order.items[1]
        self.assertEqual(lamp["unit_price"], "249.00")
        self.assertEqual(lamp["customization_price"], "15.00")
        self.assertEqual(lamp["price_total"], "264.00")
        self.assertEqual(lamp["customizations"][0]["priceModifier"], "15.00")
        self.assertEqual(lamp["customizations"][0]["selectedMaterial"]["priceModifier"], "15.00")
        self.assertTrue(lamp["non_refundable"])
        self.assertEqual(lamp["non_refundable_reason"], "Produkt na zamówienie")

        vase = order.items[0]
        self.assertEqual(vase["price_total"], "178.00")
        self.assertFalse(vase["non_refundable"])

    def test_missing_required_customization_rejected(self, create_intent):
        payload = self._payload()
        payload["items"][1]["customizations"] = []

        res = self.client.post(CHECKOUT_URL, payload, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "CUSTOMIZATION_REQUIRED")
        self.assertFalse(Order.objects.exists())
        create_intent.assert_not_called()

    def test_non_refundable_must_be_accepted(self, create_intent):
        payload = self._payload()
        payload["items"][1]["non_refundable_accepted"] = False

        res = self.client.post(CHECKOUT_URL, payload, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "NON_REFUNDABLE_NOT_ACCEPTED")
        self.assertFalse(Order.objects.exists())

    def test_locker_delivery_needs_locker(self, create_intent):
        res = self.client.post(CHECKOUT_URL, self._payload(delivery_details={}), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_DELIVERY_DETAILS")

    def test_courier_needs_valid_postal_code(self, create_intent):
        address = {"street": "Długa 1", "city": "Kraków", "postalCode": "31147"}
        res = self.client.post(
            CHECKOUT_URL,
            self._payload(delivery_method="courier", delivery_details={}, shipping_address=address),
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_DELIVERY_DETAILS")

        address["postalCode"] = "31-147"
        res = self.client.post(
            CHECKOUT_URL,
            self._payload(delivery_method="courier", delivery_details={}, shipping_address=address),
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["delivery_cost"], "19.99")
        self.assertEqual(res.data["grand_total"], "461.99")

    def test_unknown_delivery_method_rejected(self, create_intent):
        res = self.client.post(CHECKOUT_URL, self._payload(delivery_method="drone"), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_DELIVERY_METHOD")

    def test_unknown_product_404(self, create_intent):
        payload = self._payload(
            items=[{"product_id": "00000000-0000-0000-0000-000000000000", "quantity": 1}]
        )
        res = self.client.post(CHECKOUT_URL, payload, format="json")
        self.assertEqual(res.status_code, 404)

    def test_inactive_product_404(self, create_intent):
        self.vase.is_active = False
        self.vase.save()

        res = self.client.post(CHECKOUT_URL, self._payload(), format="json")
        self.assertEqual(res.status_code, 404)

    def test_unavailable_product_rejected(self, create_intent):
        self.vase.availability = Product.Availability.UNAVAILABLE
        self.vase.save()

        res = self.client.post(CHECKOUT_URL, self._payload(), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "PRODUCT_UNAVAILABLE")

    def test_empty_session_cart_rejected(self, create_intent):
        payload = self._payload()
        del payload["items"]

        res = self.client.post(CHECKOUT_URL, payload, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "EMPTY_CART")

    def test_checkout_from_session_cart(self, create_intent):
        self.client.post("/api/cart/items/", {"product_id": str(self.vase.id)}, format="json")
        self.client.post("/api/cart/items/", {"product_id": str(self.vase.id)}, format="json")
        payload = self._payload()
        del payload["items"]

        res = self.client.post(CHECKOUT_URL, payload, format="json")

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["total"], "178.00")
        self.assertEqual(res.data["grand_total"], "193.00")

    def test_gateway_failure_rolls_back_order(self, create_intent):
        create_intent.side_effect = PaymentGatewayError("Stripe URLError: timeout")

        res = self.client.post(CHECKOUT_URL, self._payload(), format="json")

        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.data["error"]["code"], "PAYMENT_GATEWAY_ERROR")
        self.assertFalse(Order.objects.exists())


class CheckoutConfigApiTests(TestCase):
    def test_config(self):
        res = APIClient().get("/api/checkout/config/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["publishable_key"], "pk_test_layered")
        self.assertEqual(res.data["currency"], "pln")
        self.assertEqual(res.data["default_delivery_method"], "inpost_locker")

        costs = {m["code"]: m["cost"] for m in res.data["delivery_methods"]}
        self.assertEqual(costs, {"inpost_locker": "15.00", "courier": "19.99", "pickup": "0.00"})
