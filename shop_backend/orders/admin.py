# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderStatusEvent, PaymentEvent


class OrderStatusEventInline(admin.TabularInline):
    model = OrderStatusEvent
    extra = 0
    can_delete = False
    readonly_fields = ("from_status", "to_status", "source", "actor", "note", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Status is read-only here: transitions go through the admin API."""

    list_display = ("order_no", "customer_email", "status", "total", "delivery_cost", "created_at")
    list_filter = ("status", "delivery_method", "has_non_refundable")
    search_fields = ("order_no", "customer_email", "customer_name", "payment_intent_id")
    ordering = ("-created_at",)
    inlines = [OrderStatusEventInline]
    readonly_fields = (
        "order_no",
        "user",
        "items",
        "total",
        "delivery_method",
        "delivery_cost",
        "currency",
        "payment_intent_id",
        "status",
        "status_note",
        "has_non_refundable",
        "created_at",
        "updated_at",
        "paid_at",
        "processing_at",
        "shipped_at",
        "delivered_at",
        "cancelled_at",
        "refunded_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "outcome", "amount", "currency", "created_at")
    list_filter = ("event_type", "outcome")
    search_fields = ("event_id", "payment_intent_id")
    readonly_fields = [f.name for f in PaymentEvent._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
