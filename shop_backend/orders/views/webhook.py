# orders/views/webhook.py

"""
STRIPE WEBHOOK

POST /api/payments/webhook/

- the raw body is verified against Stripe-Signature before anything is parsed
- a bad signature is the only 400; handled outcomes (ignored and duplicate
  events included) answer 200 so Stripe stops retrying
- an unexpected error rolls the PaymentEvent row back and answers 500, so
  Stripe redelivers and the retry is processed from scratch
"""

from __future__ import annotations

import json
import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from orders.services.payments import process_payment_event
from orders.services.stripe import verify_stripe_signature

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


class StripeWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [WebhookThrottle]

    @extend_schema(
        tags=["Payments"],
        request=None,
        responses={
            200: OpenApiResponse(description="Event accepted"),
            400: OpenApiResponse(description="Invalid signature"),
            500: OpenApiResponse(description="Processing failed; Stripe redelivers"),
        },
    )
    def post(self, request, *args, **kwargs):
        raw_body = request.body or b""
        signature = request.headers.get("Stripe-Signature")

        if not verify_stripe_signature(payload=raw_body, header=signature):
            logger.warning("Invalid Stripe signature")
            return Response(
                {"ok": False, "detail": "Invalid signature"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            event = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Webhook body is not valid JSON")
            return Response({"ok": True, "detail": "Malformed payload"}, status=status.HTTP_200_OK)

        if not isinstance(event, dict) or not event.get("id"):
            logger.warning("Webhook received without event id")
            return Response({"ok": True, "detail": "No event id"}, status=status.HTTP_200_OK)

        event_id = str(event.get("id"))
        logger.info(
            "Stripe webhook received",
            extra={"event_id": event_id, "event_type": event.get("type")},
        )

        try:
            result = process_payment_event(event)
        except Exception:
            logger.exception("Unhandled webhook error", extra={"event_id": event_id})
            return Response(
                {"ok": False, "detail": "Processing failed"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(
            {"ok": True, "detail": result.detail, "outcome": result.outcome},
            status=status.HTTP_200_OK,
        )
