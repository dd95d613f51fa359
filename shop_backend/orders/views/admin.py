# orders/views/admin.py

"""
BACK-OFFICE ORDER VIEWS (mounted under /api/admin/)

- GET   orders/                 list (?status=, ?search=, ?created_from=, ?created_to=)
- GET   orders/<id>/            detail with status history
- PATCH orders/<id>/            admin_notes / tracking_number
- GET   orders/<id>/status/     current status + allowed next statuses
- PUT   orders/<id>/status/     transition (optional expected_status guard -> 409)
- GET   stats/                  dashboard counters

Reads are open to every staff role; writes need the admin role.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db.models import Sum
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.models import Product
from core.api import domain_error_response, error_response
from core.exceptions import ShopError
from core.money import ZERO, money
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    AdminOrderSerializer,
    AdminOrderUpdateSerializer,
    OrderStatusSerializer,
    OrderStatusUpdateSerializer,
)
from orders.services import order_lifecycle as lifecycle
from orders.services.order_transitions import transition_order
from users.permissions import IsAdmin, IsStaff

logger = logging.getLogger(__name__)

# Statuses where the money has been collected and not given back
REVENUE_STATES = {
    lifecycle.PAID,
    lifecycle.PROCESSING,
    lifecycle.AWAITING_INFO,
    lifecycle.SHIPPED,
    lifecycle.DELIVERED,
    lifecycle.REFUND_REQUESTED,
}


def _read_or_admin(request):
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return [IsAuthenticated(), IsStaff()]
    return [IsAuthenticated(), IsAdmin()]


def _order_or_404(order_id):
    return Order.objects.filter(id=order_id).first()


def _not_found():
    return error_response(
        code="NOT_FOUND",
        message="Order not found",
        http_status=status.HTTP_404_NOT_FOUND,
    )


def _status_payload(order: Order) -> dict:
    return {
        "id": order.id,
        "order_no": order.order_no,
        "status": order.status,
        "status_note": order.status_note,
        "tracking_number": order.tracking_number,
        "next_statuses": lifecycle.next_statuses(from_status=order.status, source=lifecycle.ADMIN),
        "history": order.status_events.select_related("actor").all(),
    }


class AdminOrderListView(generics.ListAPIView):
    serializer_class = AdminOrderSerializer
    permission_classes = [IsAuthenticated, IsStaff]
    filterset_class = OrderFilter

    def get_queryset(self):
        return (
            Order.objects.select_related("user")
            .prefetch_related("status_events__actor")
            .order_by("-created_at")
        )

    @extend_schema(tags=["Admin - Orders"], responses={200: AdminOrderSerializer(many=True)})
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderDetailView(APIView):
    def get_permissions(self):
        return _read_or_admin(self.request)

    @extend_schema(tags=["Admin - Orders"], responses={200: AdminOrderSerializer})
    def get(self, request, order_id):
        order = _order_or_404(order_id)
        if order is None:
            return _not_found()
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Admin - Orders"],
        request=AdminOrderUpdateSerializer,
        responses={200: AdminOrderSerializer},
    )
    def patch(self, request, order_id):
        order = _order_or_404(order_id)
        if order is None:
            return _not_found()

        ser = AdminOrderUpdateSerializer(order, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        touched = list(ser.validated_data.keys())
        for field, value in ser.validated_data.items():
            setattr(order, field, (value or "").strip())
        if touched:
            order.save(update_fields=touched + ["updated_at"])

        logger.info(
            "Order annotated",
            extra={"order_id": str(order.id), "fields": touched, "user_id": str(request.user.id)},
        )
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)


class AdminOrderStatusView(APIView):
    def get_permissions(self):
        return _read_or_admin(self.request)

    @extend_schema(tags=["Admin - Orders"], responses={200: OrderStatusSerializer})
    def get(self, request, order_id):
        order = _order_or_404(order_id)
        if order is None:
            return _not_found()
        return Response(OrderStatusSerializer(_status_payload(order)).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Admin - Orders"],
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderStatusSerializer,
            400: OpenApiResponse(description="Invalid transition"),
            404: OpenApiResponse(description="Not found"),
            409: OpenApiResponse(description="Status changed since it was read"),
        },
    )
    def put(self, request, order_id):
        ser = OrderStatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        try:
            result = transition_order(
                order_id=order_id,
                to_status=data["status"],
                expected_status=data.get("expected_status"),
                actor=request.user,
                source=lifecycle.ADMIN,
                note=data.get("note", ""),
                tracking_number=data.get("tracking_number") or None,
            )
        except ShopError as exc:
            return domain_error_response(exc)

        return Response(
            OrderStatusSerializer(_status_payload(result.order)).data,
            status=status.HTTP_200_OK,
        )


class AdminStatsView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(tags=["Admin - Orders"], responses={200: OpenApiResponse(description="Counters")})
    def get(self, request):
        revenue_rows = Order.objects.filter(status__in=REVENUE_STATES).aggregate(
            items=Sum("total"), delivery=Sum("delivery_cost")
        )
        revenue = money(revenue_rows["items"] or ZERO) + money(revenue_rows["delivery"] or ZERO)

        return Response(
            {
                "totalProducts": Product.objects.filter(is_active=True).count(),
                "totalOrders": Order.objects.count(),
                "totalUsers": get_user_model().objects.count(),
                "revenue": float(revenue),
                "pendingOrders": Order.objects.filter(status=lifecycle.PENDING).count(),
                "awaitingInfoOrders": Order.objects.filter(status=lifecycle.AWAITING_INFO).count(),
            },
            status=status.HTTP_200_OK,
        )
