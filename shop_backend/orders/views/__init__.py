# orders/views/__init__.py

from .order import OrderViewSet

__all__ = [
    "OrderViewSet",
]
