# cart/serializers.py

"""
CART SERIALIZERS

Output shape is computed from the Cart aggregator (totals are never taken
from the client). Input serializers double as Swagger request docs.
"""

from rest_framework import serializers

from core.money import money_str


class CartLineSerializer(serializers.Serializer):
    id = serializers.CharField()
    cartItemId = serializers.CharField(source="cart_item_id")
    name = serializers.CharField()
    image = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField()
    customizations = serializers.ListField(child=serializers.DictField())
    customizationPrice = serializers.DecimalField(
        source="customization_price", max_digits=12, decimal_places=2
    )
    priceTotal = serializers.DecimalField(source="price_total", max_digits=12, decimal_places=2)
    nonRefundable = serializers.BooleanField(source="non_refundable")
    nonRefundableAccepted = serializers.BooleanField(source="non_refundable_accepted")


class CartSerializer(serializers.Serializer):
    items = serializers.SerializerMethodField()
    total_items = serializers.IntegerField()
    total_price = serializers.SerializerMethodField()
    has_non_refundable = serializers.BooleanField()

    def get_items(self, cart) -> list:
        return CartLineSerializer(cart.lines, many=True).data

    def get_total_price(self, cart) -> str:
        return money_str(cart.total_price)


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    customizations = serializers.ListField(
        child=serializers.DictField(), required=False, default=list
    )
    non_refundable_accepted = serializers.BooleanField(required=False, default=False)


class UpdateQuantityInputSerializer(serializers.Serializer):
    # type check happens in the aggregator so non-integers surface as domain errors
    quantity = serializers.JSONField()


class UpdateCustomizationsInputSerializer(serializers.Serializer):
    customizations = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class NonRefundableAcceptanceInputSerializer(serializers.Serializer):
    accepted = serializers.BooleanField()
