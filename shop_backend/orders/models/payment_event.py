# orders/models/payment_event.py

from decimal import Decimal

from django.db import models


class PaymentEvent(models.Model):
    """
    Processed payment gateway event.

    Idempotency rule:
    - event_id is unique; a replayed webhook finds its row and does nothing
    """

    OUTCOME_CONFIRMED = "confirmed"
    OUTCOME_FAILED = "failed"
    OUTCOME_IGNORED = "ignored"

    OUTCOME_CHOICES = [
        (OUTCOME_CONFIRMED, "Confirmed"),
        (OUTCOME_FAILED, "Failed"),
        (OUTCOME_IGNORED, "Ignored"),
    ]

    event_id = models.CharField(max_length=128, unique=True)
    event_type = models.CharField(max_length=64)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payment_events",
    )
    payment_intent_id = models.CharField(max_length=128, blank=True, default="")

    amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=8, blank=True, default="")

    outcome = models.CharField(max_length=16, choices=OUTCOME_CHOICES)
    detail = models.CharField(max_length=255, blank=True, default="")
    payload = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["payment_intent_id"]),
            models.Index(fields=["event_type"]),
        ]

    def __str__(self):
        amount = self.amount if self.amount is not None else Decimal("0.00")
        return f"{self.event_type} {self.event_id} ({self.outcome}, {amount})"
