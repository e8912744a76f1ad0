# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "name",
            "quantity",
            "unit_price",
            "line_total",
            "image",
        ]
        read_only_fields = fields


class OrderOwnerSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    email = serializers.EmailField(read_only=True)
    first_name = serializers.CharField(read_only=True)
    last_name = serializers.CharField(read_only=True)


class OrderSerializer(serializers.ModelSerializer):
    """
    Read model for orders. Every field is read-only: state changes go
    through the order service actions, never through a generic update.
    """

    owner = OrderOwnerSerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "owner",
            "items",
            "shipping_address",
            "items_total",
            "tax",
            "shipping",
            "grand_total",
            "status",
            "is_paid",
            "paid_at",
            "payment_reference",
            "is_delivered",
            "delivered_at",
            "cancel_reason",
            "cancel_requested_at",
            "stock_released_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
