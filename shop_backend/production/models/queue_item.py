# production/models/queue_item.py

import uuid

from django.conf import settings
from django.db import models


class ProductionQueueItem(models.Model):
    """
    One printable unit of work: a single line of an order.

    Projection only: its sub-status never changes the order's status.
    """

    STATUS_PENDING = "pending"
    STATUS_PREPARING = "preparing"
    STATUS_PRINTING = "printing"
    STATUS_POST_PROCESSING = "post_processing"
    STATUS_READY = "ready"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PREPARING, "Preparing"),
        (STATUS_PRINTING, "Printing"),
        (STATUS_POST_PROCESSING, "Post-processing"),
        (STATUS_READY, "Ready"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="production_items",
    )
    order_item_index = models.PositiveIntegerField()

    printer = models.ForeignKey(
        "production.Printer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="queue_items",
    )
    material = models.ForeignKey(
        "production.Material",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="queue_items",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_items",
    )

    priority = models.IntegerField(default=0)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING)

    estimated_time_minutes = models.PositiveIntegerField(null=True, blank=True)
    actual_time_minutes = models.PositiveIntegerField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-priority", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "order_item_index"],
                name="uniq_production_item_per_order_line",
            )
        ]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["priority", "created_at"]),
        ]

    def __str__(self):
        return f"{self.order_id}#{self.order_item_index} ({self.status})"
