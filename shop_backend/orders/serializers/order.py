# orders/serializers/order.py

"""
ORDER SERIALIZERS

Read-only views of an order. Status is never written through a model
serializer: it changes only via orders.services.order_transitions.
"""

from rest_framework import serializers

from orders.models import Order, OrderStatusEvent
from orders.services import order_lifecycle as lifecycle


class OrderStatusEventSerializer(serializers.ModelSerializer):
    actor_email = serializers.EmailField(source="actor.email", read_only=True, default=None)

    class Meta:
        model = OrderStatusEvent
        fields = ["from_status", "to_status", "source", "note", "actor_email", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Customer-facing order (no admin notes, no audit trail)."""

    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    can_request_refund = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "status",
            "status_note",
            "items",
            "total",
            "delivery_method",
            "delivery_cost",
            "delivery_details",
            "grand_total",
            "currency",
            "shipping_address",
            "customer_email",
            "customer_name",
            "customer_phone",
            "has_non_refundable",
            "tracking_number",
            "can_request_refund",
            "created_at",
            "paid_at",
            "shipped_at",
            "delivered_at",
        ]
        read_only_fields = fields

    def get_can_request_refund(self, obj) -> bool:
        return lifecycle.can_transition(
            from_status=obj.status,
            to_status=lifecycle.REFUND_REQUESTED,
            source=lifecycle.CUSTOMER,
        ) and not obj.all_items_non_refundable


class AdminOrderSerializer(serializers.ModelSerializer):
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)
    next_statuses = serializers.SerializerMethodField()
    status_events = OrderStatusEventSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "user",
            "user_email",
            "status",
            "status_note",
            "next_statuses",
            "items",
            "total",
            "delivery_method",
            "delivery_cost",
            "delivery_details",
            "grand_total",
            "currency",
            "payment_intent_id",
            "shipping_address",
            "customer_email",
            "customer_name",
            "customer_phone",
            "has_non_refundable",
            "admin_notes",
            "tracking_number",
            "status_events",
            "created_at",
            "updated_at",
            "paid_at",
            "processing_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
            "refunded_at",
        ]
        read_only_fields = fields

    def get_next_statuses(self, obj) -> list:
        return lifecycle.next_statuses(from_status=obj.status, source=lifecycle.ADMIN)


class AdminOrderUpdateSerializer(serializers.ModelSerializer):
    """Annotation fields only."""

    class Meta:
        model = Order
        fields = ["admin_notes", "tracking_number"]
        extra_kwargs = {
            "admin_notes": {"required": False, "allow_blank": True},
            "tracking_number": {"required": False, "allow_blank": True},
        }


class OrderStatusSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    order_no = serializers.CharField()
    status = serializers.CharField()
    status_note = serializers.CharField(allow_blank=True)
    tracking_number = serializers.CharField(allow_blank=True)
    next_statuses = serializers.ListField(child=serializers.CharField())
    history = OrderStatusEventSerializer(many=True)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    expected_status = serializers.ChoiceField(
        choices=Order.STATUS_CHOICES, required=False
    )
    note = serializers.CharField(required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(required=False, allow_blank=True, default="")


class RefundRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    email = serializers.EmailField(required=False)
