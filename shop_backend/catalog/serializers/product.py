# catalog/serializers/product.py

"""
PRODUCT SERIALIZERS

- ProductSerializer: public storefront shape (read-only)
- ProductAdminSerializer: back-office CRUD; customization schema is validated
  through the same parser the cart and checkout use
"""

from rest_framework import serializers

from catalog.customization import parse_customization_schema
from catalog.models import DEFAULT_CATEGORY, Product
from core.exceptions import ValidationError as ShopValidationError


class ProductSerializer(serializers.ModelSerializer):
    non_refundable = serializers.SerializerMethodField()
    non_refundable_reason = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "availability",
            "images",
            "specifications",
            "customization",
            "non_refundable",
            "non_refundable_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_non_refundable(self, obj) -> bool:
        return obj.is_non_refundable

    def get_non_refundable_reason(self, obj) -> str:
        parsed = obj.parsed_customization
        return parsed.non_refundable_reason if parsed else ""


class ProductAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "availability",
            "images",
            "specifications",
            "customization",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_price(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("Price must be greater than zero")
        return value

    def validate_category(self, value):
        return (value or "").strip() or DEFAULT_CATEGORY

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
            raise serializers.ValidationError("images must be a list of URLs")
        return value

    def validate_customization(self, value):
        try:
            parse_customization_schema(value)
        except ShopValidationError as exc:
            raise serializers.ValidationError(exc.message)
        return value or None
