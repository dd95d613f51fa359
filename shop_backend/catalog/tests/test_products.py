# catalog/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Product

User = get_user_model()


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - Category defaults to "Inne"
    - Price must be positive
    - Customization schema is validated before save
    """

    def test_product_creation_defaults(self):
        product = Product.objects.create(name="Wazon Spiral", price=Decimal("89.00"))

        self.assertEqual(product.category, "Inne")
        self.assertEqual(product.availability, Product.Availability.AVAILABLE)
        self.assertEqual(product.images, [])
        self.assertFalse(product.is_non_refundable)

    def test_price_must_be_positive(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(name="Free", price=Decimal("0.00"))

    def test_invalid_customization_rejected(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(
                name="Broken",
                price=Decimal("10.00"),
                customization={"options": [{"id": "x", "type": "hologram", "label": "X"}]},
            )

    def test_non_refundable_flag_from_schema(self):
        product = Product.objects.create(
            name="Brelok z imieniem",
            price=Decimal("25.00"),
            customization={
                "options": [{"id": "name", "type": "text", "label": "Imię", "required": True}],
                "nonRefundable": True,
            },
        )
        self.assertTrue(product.is_non_refundable)


class PublicCatalogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.vase = Product.objects.create(
            name="Wazon Spiral", price=Decimal("89.00"), category="Dekoracje"
        )
        self.lamp = Product.objects.create(
            name="Lampa Voronoi", price=Decimal("249.00"), category="Oświetlenie"
        )
        self.hidden = Product.objects.create(
            name="Prototyp", price=Decimal("10.00"), category="Dekoracje", is_active=False
        )

    def test_list_returns_only_active_products(self):
        res = self.client.get("/api/products/")

        self.assertEqual(res.status_code, 200)
        names = {p["name"] for p in res.data["results"]}
        self.assertEqual(names, {"Wazon Spiral", "Lampa Voronoi"})

    def test_category_and_search_filters(self):
        res = self.client.get("/api/products/", {"category": "dekoracje"})
        self.assertEqual([p["name"] for p in res.data["results"]], ["Wazon Spiral"])

        res = self.client.get("/api/products/", {"search": "voronoi"})
        self.assertEqual([p["name"] for p in res.data["results"]], ["Lampa Voronoi"])

    def test_detail_and_inactive_404(self):
        res = self.client.get(f"/api/products/{self.lamp.id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["price"], "249.00")

        res = self.client.get(f"/api/products/{self.hidden.id}/")
        self.assertEqual(res.status_code, 404)

    def test_categories(self):
        res = self.client.get("/api/products/categories/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["results"], ["Dekoracje", "Oświetlenie"])


class AdminProductApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@layered.pl", password="pass", role="admin")
        self.support = User.objects.create_user(
            email="support@layered.pl", password="pass", role="support"
        )

    def test_admin_can_create_product_with_customization(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/admin/products/",
            {
                "name": "Figurka",
                "price": "49.00",
                "customization": {
                    "options": [
                        {
                            "id": "color",
                            "type": "color",
                            "label": "Kolor",
                            "colorOptions": [{"name": "Red", "hex": "#f00"}],
                        }
                    ]
                },
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["category"], "Inne")

    def test_invalid_schema_is_400(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/admin/products/",
            {"name": "X", "price": "10.00", "customization": {"options": "nope"}},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("customization", res.data)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(self.support)
        res = self.client.get("/api/admin/products/")
        self.assertEqual(res.status_code, 403)

    def test_delete_deactivates(self):
        product = Product.objects.create(name="Stary", price=Decimal("5.00"))
        self.client.force_authenticate(self.admin)

        res = self.client.delete(f"/api/admin/products/{product.id}/")

        self.assertEqual(res.status_code, 204)
        product.refresh_from_db()
        self.assertFalse(product.is_active)
