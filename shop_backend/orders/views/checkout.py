# orders/views/checkout.py

"""
CHECKOUT API

- POST /api/checkout/create-payment-intent/   cart -> pending order + Stripe PaymentIntent
- GET  /api/checkout/config/                  publishable key + delivery methods

The browser confirms the PaymentIntent with Stripe directly; the order only
becomes paid through the webhook (orders.views.webhook).

Security hardening:
- Throttle (public_write) because it's a write endpoint (abuse target)
"""

from __future__ import annotations

import logging

from django.conf import settings
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from cart.services.cart import Cart
from core.api import domain_error_response
from core.exceptions import PaymentGatewayError, ShopError
from core.money import money_str
from orders.serializers import (
    CheckoutConfigSerializer,
    CheckoutInputSerializer,
    CheckoutResponseSerializer,
)
from orders.services.checkout import (
    CheckoutLine,
    create_order_with_payment_intent,
    delivery_options,
)
from orders.services.stripe import get_publishable_key

logger = logging.getLogger(__name__)


class PublicWriteThrottle(AnonRateThrottle):
    """
    For public write endpoints (checkout, refund request, contact form).
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['public_write'].
    """

    scope = "public_write"


def _lines_from_payload(items) -> list[CheckoutLine]:
    return [
        CheckoutLine(
            product_id=str(item["product_id"]),
            quantity=item.get("quantity", 1),
            customizations=item.get("customizations") or [],
            non_refundable_accepted=bool(item.get("non_refundable_accepted")),
        )
        for item in items
    ]


def _lines_from_cart(cart: Cart) -> list[CheckoutLine]:
    return [
        CheckoutLine(
            product_id=line.id,
            quantity=line.quantity,
            customizations=line.customizations,
            non_refundable_accepted=line.non_refundable_accepted,
        )
        for line in cart
    ]


class CreatePaymentIntentView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Checkout"],
        request=CheckoutInputSerializer,
        responses={
            201: CheckoutResponseSerializer,
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Unknown product"),
            502: OpenApiResponse(description="Payment gateway error"),
        },
        description=(
            "Re-prices every line from the catalog, validates required customizations "
            "and non-refundable acceptance, creates a pending order and a PaymentIntent "
            "for the grand total. Omit `items` to check out the session cart."
        ),
    )
    def post(self, request):
        ser = CheckoutInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if "items" in data:
            lines = _lines_from_payload(data["items"])
        else:
            lines = _lines_from_cart(Cart(request.session))

        try:
            result = create_order_with_payment_intent(
                lines=lines,
                customer_email=data["customer_email"],
                customer_name=data.get("customer_name", ""),
                customer_phone=data.get("customer_phone", ""),
                shipping_address=dict(data.get("shipping_address") or {}),
                delivery_method=data.get("delivery_method"),
                delivery_details=data.get("delivery_details") or {},
                user=request.user,
            )
        except PaymentGatewayError as exc:
            logger.exception("Payment intent creation failed")
            return domain_error_response(exc)
        except ShopError as exc:
            return domain_error_response(exc)

        order = result.order
        payload = {
            "order_id": order.id,
            "order_no": order.order_no,
            "client_secret": result.client_secret,
            "payment_intent_id": result.payment_intent_id,
            "currency": order.currency,
            "total": money_str(order.total),
            "delivery_cost": money_str(order.delivery_cost),
            "grand_total": money_str(order.grand_total),
        }
        return Response(CheckoutResponseSerializer(payload).data, status=status.HTTP_201_CREATED)


class CheckoutConfigView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(tags=["Checkout"], responses={200: CheckoutConfigSerializer})
    def get(self, request):
        payload = {
            "publishable_key": get_publishable_key(),
            "currency": settings.SHOP_CURRENCY,
            "default_delivery_method": getattr(settings, "DEFAULT_DELIVERY_METHOD", ""),
            "delivery_methods": delivery_options(),
        }
        return Response(CheckoutConfigSerializer(payload).data, status=status.HTTP_200_OK)
