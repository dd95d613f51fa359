# production/serializers/queue.py

"""
PRODUCTION QUEUE SERIALIZERS

Queue rows are enriched with what the workshop screen shows next to them:
order number, customer, the frozen order line, printer / material names.
"""

from rest_framework import serializers

from production.models import ProductionQueueItem
from production.services import production_lifecycle as lifecycle


class QueueItemSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    order_no = serializers.CharField(source="order.order_no", read_only=True)
    order_status = serializers.CharField(source="order.status", read_only=True)
    customer_name = serializers.CharField(source="order.customer_name", read_only=True)
    customer_email = serializers.EmailField(source="order.customer_email", read_only=True)
    item = serializers.SerializerMethodField()
    printer_name = serializers.CharField(source="printer.name", read_only=True, default=None)
    material_name = serializers.SerializerMethodField()
    assigned_to_email = serializers.EmailField(
        source="assigned_to.email", read_only=True, default=None
    )
    next_status = serializers.SerializerMethodField()

    class Meta:
        model = ProductionQueueItem
        fields = [
            "id",
            "order_id",
            "order_no",
            "order_status",
            "customer_name",
            "customer_email",
            "order_item_index",
            "item",
            "printer",
            "printer_name",
            "material",
            "material_name",
            "assigned_to",
            "assigned_to_email",
            "priority",
            "status",
            "next_status",
            "estimated_time_minutes",
            "actual_time_minutes",
            "notes",
            "started_at",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_item(self, obj) -> dict:
        items = obj.order.items or []
        if obj.order_item_index >= len(items):
            return {}
        line = items[obj.order_item_index]
        return {
            "name": line.get("name", ""),
            "image": line.get("image", ""),
            "quantity": line.get("quantity", 0),
            "customization_summary": line.get("customization_summary", []),
        }

    def get_material_name(self, obj):
        return str(obj.material) if obj.material_id else None

    def get_next_status(self, obj):
        return lifecycle.next_status(obj.status)


class QueueItemUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProductionQueueItem.STATUS_CHOICES, required=False)
    printer_id = serializers.UUIDField(required=False, allow_null=True)
    material_id = serializers.UUIDField(required=False, allow_null=True)
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)
    priority = serializers.IntegerField(required=False)
    estimated_time_minutes = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    actual_time_minutes = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True)
