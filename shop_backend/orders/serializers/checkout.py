# orders/serializers/checkout.py

from rest_framework import serializers


class CheckoutLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    customizations = serializers.ListField(
        child=serializers.DictField(), required=False, default=list
    )
    non_refundable_accepted = serializers.BooleanField(required=False, default=False)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="")
    street = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(required=False, allow_blank=True, default="")
    postalCode = serializers.CharField(required=False, allow_blank=True, default="")
    country = serializers.CharField(required=False, allow_blank=True, default="PL")


class CheckoutInputSerializer(serializers.Serializer):
    """
    items is optional: when omitted, the session cart is checked out.
    """

    items = CheckoutLineInputSerializer(many=True, required=False)

    customer_email = serializers.EmailField()
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")

    shipping_address = ShippingAddressSerializer(required=False)
    delivery_method = serializers.CharField(required=False, allow_blank=True, default="")
    delivery_details = serializers.DictField(required=False, default=dict)


class CheckoutResponseSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    order_no = serializers.CharField()
    client_secret = serializers.CharField()
    payment_intent_id = serializers.CharField()
    currency = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    delivery_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class DeliveryMethodSerializer(serializers.Serializer):
    code = serializers.CharField()
    label = serializers.CharField()
    cost = serializers.DecimalField(max_digits=12, decimal_places=2)


class CheckoutConfigSerializer(serializers.Serializer):
    publishable_key = serializers.CharField()
    currency = serializers.CharField()
    default_delivery_method = serializers.CharField()
    delivery_methods = DeliveryMethodSerializer(many=True)
