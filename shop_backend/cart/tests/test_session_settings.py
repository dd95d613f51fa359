# cart/tests/test_session_settings.py

import importlib
import os
import sys
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from catalog.models import Product

STOREFRONT = "https://sklep.layered.pl"

PROD_ENV = {
    "SECRET_KEY": "prod-secret-key-for-settings-check",
    "ALLOWED_HOSTS": "api.layered.pl",
    "DATABASE_URL": "postgres://shop:shop@db:5432/shop",
    "CACHE_URL": "redis://cache:6379/1",
    "CORS_ALLOWED_ORIGINS": STOREFRONT,
    "CSRF_TRUSTED_ORIGINS": STOREFRONT,
}


def load_prod_settings(**extra_env):
    sys.modules.pop("backend.settings.prod", None)
    try:
        with mock.patch.dict(os.environ, {**PROD_ENV, **extra_env}):
            return importlib.import_module("backend.settings.prod")
    finally:
        sys.modules.pop("backend.settings.prod", None)


class ProductionCartSessionTests(TestCase):
    """
    GUARANTEES:
    - a storefront on another origin gets credentialed CORS responses
    - the cart session cookie is sent cross-site (SameSite=None + Secure)
    """

    def setUp(self):
        self.prod = load_prod_settings()
        self.client = APIClient()

    def test_prod_allows_credentials_and_cross_site_session(self):
        self.assertTrue(self.prod.CORS_ALLOW_CREDENTIALS)
        self.assertEqual(self.prod.SESSION_COOKIE_SAMESITE, "None")
        self.assertTrue(self.prod.SESSION_COOKIE_SECURE)

    def test_samesite_is_configurable(self):
        prod = load_prod_settings(SESSION_COOKIE_SAMESITE="Lax")
        self.assertEqual(prod.SESSION_COOKIE_SAMESITE, "Lax")

    def test_cart_preflight_allows_credentials(self):
        with override_settings(
            CORS_ALLOWED_ORIGINS=self.prod.CORS_ALLOWED_ORIGINS,
            CORS_ALLOW_CREDENTIALS=self.prod.CORS_ALLOW_CREDENTIALS,
        ):
            res = self.client.options(
                "/api/cart/items/",
                HTTP_ORIGIN=STOREFRONT,
                HTTP_ACCESS_CONTROL_REQUEST_METHOD="POST",
            )

        self.assertEqual(res["Access-Control-Allow-Origin"], STOREFRONT)
        self.assertEqual(res["Access-Control-Allow-Credentials"], "true")

    def test_cart_cookie_survives_cross_site_round_trip(self):
        vase = Product.objects.create(name="Wazon Spiral", price=Decimal("89.00"))

        with override_settings(
            SESSION_COOKIE_SAMESITE=self.prod.SESSION_COOKIE_SAMESITE,
            SESSION_COOKIE_SECURE=self.prod.SESSION_COOKIE_SECURE,
        ):
            res = self.client.post(
                "/api/cart/items/", {"product_id": str(vase.id)}, format="json"
            )
            cookie = res.cookies["sessionid"]
            self.assertEqual(cookie["samesite"], "None")
            self.assertTrue(cookie["secure"])

            res = self.client.get("/api/cart/")

        self.assertEqual(res.data["total_items"], 1)
