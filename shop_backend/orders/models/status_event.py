# orders/models/status_event.py

from django.conf import settings
from django.db import models


class OrderStatusEvent(models.Model):
    """
    Append-only audit row, one per successful status transition.
    """

    SOURCE_ADMIN = "admin"
    SOURCE_PAYMENT = "payment"
    SOURCE_CUSTOMER = "customer"
    SOURCE_DELIVERY = "delivery"
    SOURCE_SYSTEM = "system"

    SOURCE_CHOICES = [
        (SOURCE_ADMIN, "Admin"),
        (SOURCE_PAYMENT, "Payment"),
        (SOURCE_CUSTOMER, "Customer"),
        (SOURCE_DELIVERY, "Delivery tracking"),
        (SOURCE_SYSTEM, "System"),
    ]

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="status_events",
    )

    from_status = models.CharField(max_length=32)
    to_status = models.CharField(max_length=32)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_events",
    )
    source = models.CharField(max_length=16, choices=SOURCE_CHOICES, default=SOURCE_ADMIN)
    note = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [models.Index(fields=["order", "created_at"])]

    def __str__(self):
        return f"{self.order_id}: {self.from_status} -> {self.to_status} ({self.source})"
