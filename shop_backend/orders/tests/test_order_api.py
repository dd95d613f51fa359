# orders/tests/test_order_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Product
from orders.models import Order
from orders.services import order_lifecycle as lifecycle
from orders.tests.test_order_transitions import make_order

User = get_user_model()


class AdminOrderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@layered.pl", password="pass", role="admin"
        )
        self.support = User.objects.create_user(
            email="support@layered.pl", password="pass", role="support"
        )
        self.customer = User.objects.create_user(email="jan@example.com", password="pass")

    def _status_url(self, order):
        return f"/api/admin/orders/{order.id}/status/"

    def test_list_requires_staff(self):
        make_order()

        self.assertEqual(self.client.get("/api/admin/orders/").status_code, 401)

        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get("/api/admin/orders/").status_code, 403)

        self.client.force_authenticate(self.support)
        res = self.client.get("/api/admin/orders/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

    def test_list_filters_by_status_and_search(self):
        make_order(lifecycle.PAID, customer_email="ola@example.com")
        make_order(lifecycle.PENDING)
        self.client.force_authenticate(self.admin)

        res = self.client.get("/api/admin/orders/", {"status": "paid"})
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["customer_email"], "ola@example.com")
        self.assertEqual(res.data["results"][0]["grand_total"], "115.00")

        res = self.client.get("/api/admin/orders/", {"search": "ANNA@"})
        self.assertEqual(res.data["count"], 1)

    def test_status_get_lists_next_statuses(self):
        order = make_order(lifecycle.PROCESSING)
        self.client.force_authenticate(self.admin)

        res = self.client.get(self._status_url(order))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "processing")
        self.assertEqual(res.data["next_statuses"], ["awaiting_info", "cancelled", "shipped"])

    def test_status_put_ships_order(self):
        order = make_order(lifecycle.PROCESSING)
        self.client.force_authenticate(self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.put(
                self._status_url(order),
                {"status": "shipped", "tracking_number": "INP123", "expected_status": "processing"},
                format="json",
            )

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "shipped")
        self.assertEqual(res.data["tracking_number"], "INP123")
        self.assertEqual(res.data["history"][0]["to_status"], "shipped")
        self.assertEqual(res.data["history"][0]["actor_email"], "admin@layered.pl")
        self.assertEqual(len(mail.outbox), 1)

    def test_status_put_invalid_transition_400(self):
        order = make_order(lifecycle.PENDING)
        self.client.force_authenticate(self.admin)

        res = self.client.put(self._status_url(order), {"status": "paid"}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_TRANSITION")

    def test_status_put_stale_read_409(self):
        order = make_order(lifecycle.PAID)
        self.client.force_authenticate(self.admin)

        res = self.client.put(
            self._status_url(order),
            {"status": "processing", "expected_status": "pending"},
            format="json",
        )

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["error"]["code"], "CONFLICT")

    def test_status_put_unknown_order_404(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(
            "/api/admin/orders/00000000-0000-0000-0000-000000000000/status/",
            {"status": "processing"},
            format="json",
        )
        self.assertEqual(res.status_code, 404)

    def test_support_cannot_change_status(self):
        order = make_order(lifecycle.PAID)
        self.client.force_authenticate(self.support)

        res = self.client.put(self._status_url(order), {"status": "processing"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_patch_annotations_only(self):
        order = make_order(lifecycle.PROCESSING)
        self.client.force_authenticate(self.admin)

        res = self.client.patch(
            f"/api/admin/orders/{order.id}/",
            {"admin_notes": "Klient prosi o szybką wysyłkę", "status": "shipped", "total": "1.00"},
            format="json",
        )

        self.assertEqual(res.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.admin_notes, "Klient prosi o szybką wysyłkę")
        self.assertEqual(order.status, lifecycle.PROCESSING)
        self.assertEqual(order.total, Decimal("100.00"))

    def test_stats(self):
        Product.objects.create(name="Wazon Spiral", price=Decimal("89.00"))
        make_order(lifecycle.PENDING)
        make_order(lifecycle.PAID)
        make_order(lifecycle.CANCELLED)
        self.client.force_authenticate(self.admin)

        res = self.client.get("/api/admin/stats/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["totalProducts"], 1)
        self.assertEqual(res.data["totalOrders"], 3)
        self.assertEqual(res.data["totalUsers"], 3)
        self.assertEqual(res.data["pendingOrders"], 1)
        self.assertEqual(res.data["revenue"], 115.0)


class CustomerOrderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.customer = User.objects.create_user(email="anna@example.com", password="pass")

    def test_guest_detail_needs_matching_email(self):
        order = make_order(lifecycle.PAID)

        res = self.client.get(f"/api/orders/{order.id}/")
        self.assertEqual(res.status_code, 404)

        res = self.client.get(f"/api/orders/{order.id}/", {"email": "someone@example.com"})
        self.assertEqual(res.status_code, 404)

        res = self.client.get(f"/api/orders/{order.id}/", {"email": "Anna@Example.com"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["order_no"], order.order_no)
        self.assertNotIn("admin_notes", res.data)

    def test_owner_sees_order_and_list(self):
        order = make_order(lifecycle.PAID, user=self.customer)
        make_order(lifecycle.PAID)
        self.client.force_authenticate(self.customer)

        self.assertEqual(self.client.get(f"/api/orders/{order.id}/").status_code, 200)

        res = self.client.get("/api/orders/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["id"], str(order.id))

    def test_my_orders_requires_login(self):
        self.assertEqual(self.client.get("/api/orders/").status_code, 401)

    def test_refund_request(self):
        order = make_order(lifecycle.DELIVERED, non_refundable=(True, False))

        res = self.client.post(
            f"/api/orders/{order.id}/refund-request/",
            {"email": "anna@example.com", "reason": "Pęknięty wazon"},
            format="json",
        )

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "refund_requested")
        event = order.status_events.get()
        self.assertEqual(event.source, "customer")
        self.assertEqual(event.note, "Pęknięty wazon")

    def test_refund_request_blocked_for_non_refundable_order(self):
        order = make_order(lifecycle.DELIVERED, non_refundable=(True, True))

        res = self.client.post(
            f"/api/orders/{order.id}/refund-request/",
            {"email": "anna@example.com"},
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_TRANSITION")
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_DELIVERED)

    def test_refund_request_before_delivery_rejected(self):
        order = make_order(lifecycle.SHIPPED)
        self.client.force_authenticate(self.customer)
        order.user = self.customer
        order.save()

        res = self.client.post(f"/api/orders/{order.id}/refund-request/", {}, format="json")
        self.assertEqual(res.status_code, 400)
