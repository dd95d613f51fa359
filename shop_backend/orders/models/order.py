# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Order(models.Model):
    """
    Online store order.

    Key rules:
    - Created at checkout from a server-priced cart snapshot (items)
    - total = sum of item snapshot price_total, frozen at creation
    - delivery_cost is stored separately; grand_total is what gets charged
    - status changes ONLY through orders.services.order_transitions
    - never deleted
    """

    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"
    STATUS_PROCESSING = "processing"
    STATUS_AWAITING_INFO = "awaiting_info"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"
    STATUS_REFUND_REQUESTED = "refund_requested"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_AWAITING_INFO, "Awaiting info"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REFUND_REQUESTED, "Refund requested"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated public order number",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Frozen priced lines (see orders.services.checkout.build_item_snapshot)
    items = models.JSONField(default=list)

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    delivery_method = models.CharField(max_length=32, blank=True, default="")
    delivery_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    # e.g. {"locker_id": "KRA01M"} for parcel lockers
    delivery_details = models.JSONField(default=dict, blank=True)

    currency = models.CharField(max_length=8, default="pln")
    payment_intent_id = models.CharField(max_length=128, blank=True, default="", db_index=True)

    shipping_address = models.JSONField(default=dict, blank=True)

    customer_email = models.EmailField()
    customer_name = models.CharField(max_length=160, blank=True, default="")
    customer_phone = models.CharField(max_length=40, blank=True, default="")

    has_non_refundable = models.BooleanField(default=False)

    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Customer-visible (set when entering awaiting_info)
    status_note = models.TextField(blank=True, default="")

    # Back-office only
    admin_notes = models.TextField(blank=True, default="")
    tracking_number = models.CharField(max_length=120, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    processing_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"]),
            models.Index(fields=["status"]),
            models.Index(fields=["order_no"]),
            models.Index(fields=["customer_email"]),
        ]

    def save(self, *args, **kwargs):
        if not self.order_no:
            prefix = timezone.now().strftime("LAY%Y%m%d")
            self.order_no = f"{prefix}-{uuid.uuid4().hex[:6].upper()}"
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_no} | {self.grand_total} | {self.status}"

    @property
    def grand_total(self) -> Decimal:
        return (Decimal(str(self.total or 0)) + Decimal(str(self.delivery_cost or 0))).quantize(
            Decimal("0.01")
        )

    @property
    def all_items_non_refundable(self) -> bool:
        items = self.items or []
        return bool(items) and all(i.get("non_refundable") for i in items)
