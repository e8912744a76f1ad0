# orders/serializers/__init__.py

from .order import OrderItemSerializer, OrderSerializer
from .order_command import (
    OrderCancelCommandSerializer,
    OrderCreateSerializer,
    OrderStatusCommandSerializer,
    PaymentReferenceSerializer,
)

__all__ = [
    "OrderItemSerializer",
    "OrderSerializer",
    "OrderCancelCommandSerializer",
    "OrderCreateSerializer",
    "OrderStatusCommandSerializer",
    "PaymentReferenceSerializer",
]
