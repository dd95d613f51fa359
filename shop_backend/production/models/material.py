# production/models/material.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Material(models.Model):
    """
    Filament / resin stock.

    stock_status is derived, never stored:
    - out_of_stock  quantity_available <= 0
    - low_stock     quantity_available <= min_stock_level
    - available     otherwise
    """

    STOCK_AVAILABLE = "available"
    STOCK_LOW = "low_stock"
    STOCK_OUT = "out_of_stock"

    UNIT_CHOICES = [
        ("g", "Grams"),
        ("kg", "Kilograms"),
        ("ml", "Millilitres"),
        ("l", "Litres"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=120)
    type = models.CharField(max_length=32, help_text="PLA, PETG, ABS, TPU, resin ...")
    color = models.CharField(max_length=64, blank=True, default="")
    color_hex = models.CharField(max_length=9, blank=True, default="")

    quantity_available = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    quantity_unit = models.CharField(max_length=4, choices=UNIT_CHOICES, default="g")
    min_stock_level = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["type", "name"]

    def __str__(self):
        return f"{self.type} {self.name} {self.color}".strip()

    def clean(self):
        if self.quantity_available is not None and self.quantity_available < 0:
            raise ValidationError({"quantity_available": "Cannot be negative"})
        if self.min_stock_level is not None and self.min_stock_level < 0:
            raise ValidationError({"min_stock_level": "Cannot be negative"})
        if self.color_hex and not self.color_hex.startswith("#"):
            raise ValidationError({"color_hex": "Expected a #rrggbb value"})

    @property
    def stock_status(self) -> str:
        qty = Decimal(str(self.quantity_available or 0))
        if qty <= 0:
            return self.STOCK_OUT
        if qty <= Decimal(str(self.min_stock_level or 0)):
            return self.STOCK_LOW
        return self.STOCK_AVAILABLE
