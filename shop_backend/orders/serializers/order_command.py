# orders/serializers/order_command.py

"""
ORDER COMMAND SERIALIZERS

Input validation only. These serializers do NOT touch the database;
the order service owns every write.
"""

from decimal import Decimal

from rest_framework import serializers

from orders.models import Order


def _money_field(**kwargs):
    return serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        **kwargs,
    )


class OrderLineInputSerializer(serializers.Serializer):
    product = serializers.UUIDField()
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = _money_field(required=False)
    image = serializers.CharField(required=False, allow_blank=True, max_length=500)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=40)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=120)
    zip_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=120, required=False, default="India")


class OrderCreateSerializer(serializers.Serializer):
    items = OrderLineInputSerializer(many=True, allow_empty=False)
    shipping_address = ShippingAddressSerializer()

    items_total = _money_field()
    tax = _money_field(required=False, default=Decimal("0.00"))
    shipping = _money_field(required=False, default=Decimal("0.00"))
    grand_total = _money_field()

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("No order items")
        return value


class PaymentReferenceSerializer(serializers.Serializer):
    """
    Opaque provider record stored on the order as-is.
    """

    id = serializers.CharField(max_length=255)
    status = serializers.CharField(max_length=64, required=False, allow_blank=True)
    update_time = serializers.CharField(max_length=64, required=False, allow_blank=True)
    email_address = serializers.EmailField(required=False, allow_blank=True)


class OrderStatusCommandSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)


class OrderCancelCommandSerializer(serializers.Serializer):
    reason = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=500,
    )
