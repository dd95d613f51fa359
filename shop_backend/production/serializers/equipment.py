# production/serializers/equipment.py

import re

from rest_framework import serializers

from production.models import Material, Printer

HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class PrinterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Printer
        fields = ["id", "name", "model", "status", "notes", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class MaterialSerializer(serializers.ModelSerializer):
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Material
        fields = [
            "id",
            "name",
            "type",
            "color",
            "color_hex",
            "quantity_available",
            "quantity_unit",
            "min_stock_level",
            "stock_status",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "stock_status", "created_at", "updated_at"]

    def validate_quantity_available(self, value):
        if value < 0:
            raise serializers.ValidationError("Cannot be negative")
        return value

    def validate_min_stock_level(self, value):
        if value < 0:
            raise serializers.ValidationError("Cannot be negative")
        return value

    def validate_color_hex(self, value):
        value = (value or "").strip()
        if value and not HEX_COLOR_RE.match(value):
            raise serializers.ValidationError("Expected a #rrggbb value")
        return value
