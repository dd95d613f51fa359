# catalog/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from catalog.customization import parse_customization_schema
from core.exceptions import ValidationError as ShopValidationError

DEFAULT_CATEGORY = "Inne"


class Product(models.Model):
    """
    Represents a sellable (printable) product.

    PRICING MODEL:
    - price is the base price of one unit without customization
    - customization (optional) is a schema JSON; it is parsed on clean() so
      invalid schemas never reach the database
    - carts / orders snapshot prices; editing a product never rewrites orders
    """

    class Availability(models.TextChoices):
        AVAILABLE = "available", "Available"
        LOW_STOCK = "low_stock", "Low stock"
        UNAVAILABLE = "unavailable", "Unavailable"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(max_digits=10, decimal_places=2)

    category = models.CharField(max_length=120, default=DEFAULT_CATEGORY, db_index=True)

    availability = models.CharField(
        max_length=16,
        choices=Availability.choices,
        default=Availability.AVAILABLE,
    )

    # Ordered list of image URLs (first one is the cover)
    images = models.JSONField(default=list, blank=True)

    # [{"label": "...", "value": "..."}]
    specifications = models.JSONField(default=list, blank=True)

    customization = models.JSONField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"]),
            models.Index(fields=["name"]),
        ]

    def __str__(self):
        return f"{self.name} ({self.price} zł)"

    def clean(self):
        if self.price is None or Decimal(self.price) <= 0:
            raise ValidationError("Price must be greater than zero")

        self.category = (self.category or "").strip() or DEFAULT_CATEGORY

        if not isinstance(self.images, list) or not all(isinstance(i, str) for i in self.images):
            raise ValidationError({"images": "images must be a list of URLs"})

        if not isinstance(self.specifications, list):
            raise ValidationError({"specifications": "specifications must be a list"})
        for spec in self.specifications:
            if not isinstance(spec, dict) or not spec.get("label"):
                raise ValidationError(
                    {"specifications": "each specification needs a label and a value"}
                )

        try:
            parse_customization_schema(self.customization)
        except ShopValidationError as exc:
            raise ValidationError({"customization": exc.message})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    # -----------------------------
    # Derived
    # -----------------------------
    @property
    def parsed_customization(self):
        return parse_customization_schema(self.customization)

    @property
    def is_non_refundable(self) -> bool:
        parsed = self.parsed_customization
        return bool(parsed and parsed.non_refundable)

    @property
    def cover_image(self) -> str:
        return self.images[0] if self.images else ""

    @property
    def is_purchasable(self) -> bool:
        return self.is_active and self.availability != self.Availability.UNAVAILABLE
