# orders/views/customer.py

"""
CUSTOMER ORDER VIEWS

- GET  /api/orders/                         my orders (signed in)
- GET  /api/orders/<id>/?email=...          order detail (owner, or guest by email)
- POST /api/orders/<id>/refund-request/     delivered -> refund_requested

Guest access: the order id is a UUID and must be paired with the checkout
email. A mismatch answers 404 so order ids cannot be probed.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from core.api import domain_error_response, error_response
from core.exceptions import ShopError
from orders.models import Order
from orders.serializers import OrderSerializer, RefundRequestSerializer
from orders.services import order_lifecycle as lifecycle
from orders.services.order_transitions import transition_order
from orders.views.checkout import PublicWriteThrottle
from users.models.user import STAFF_ROLES

logger = logging.getLogger(__name__)


class PublicPollThrottle(AnonRateThrottle):
    """
    For public polling endpoints (order status after payment).
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['public_poll'].
    """

    scope = "public_poll"


def _visible_order(request, order_id, *, email: str = ""):
    order = Order.objects.filter(id=order_id).first()
    if order is None:
        return None

    user = request.user
    if getattr(user, "is_authenticated", False):
        if order.user_id == user.id or getattr(user, "role", None) in STAFF_ROLES:
            return order

    email = (email or "").strip().lower()
    if email and email == (order.customer_email or "").strip().lower():
        return order
    return None


def _not_found():
    return error_response(
        code="NOT_FOUND",
        message="Order not found",
        http_status=status.HTTP_404_NOT_FOUND,
    )


class MyOrdersView(generics.ListAPIView):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Order.objects.filter(user=self.request.user).order_by("-created_at")

    @extend_schema(tags=["Orders"], responses={200: OrderSerializer(many=True)})
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Orders"],
        parameters=[OpenApiParameter(name="email", type=str, location=OpenApiParameter.QUERY)],
        responses={200: OrderSerializer, 404: OpenApiResponse(description="Not found")},
    )
    def get(self, request, order_id):
        order = _visible_order(request, order_id, email=request.query_params.get("email", ""))
        if order is None:
            return _not_found()
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class RefundRequestView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Orders"],
        request=RefundRequestSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Refund not allowed"),
            404: OpenApiResponse(description="Not found"),
        },
    )
    def post(self, request, order_id):
        ser = RefundRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = _visible_order(request, order_id, email=ser.validated_data.get("email", ""))
        if order is None:
            return _not_found()

        reason = ser.validated_data.get("reason", "")
        try:
            result = transition_order(
                order_id=order.id,
                to_status=lifecycle.REFUND_REQUESTED,
                actor=request.user,
                source=lifecycle.CUSTOMER,
                note=reason,
            )
        except ShopError as exc:
            return domain_error_response(exc)

        logger.info("Refund requested", extra={"order_id": str(order.id)})
        return Response(OrderSerializer(result.order).data, status=status.HTTP_200_OK)
