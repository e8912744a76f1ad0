# products/serializers/__init__.py

from .product import ProductSerializer, StockAdjustmentSerializer

__all__ = [
    "ProductSerializer",
    "StockAdjustmentSerializer",
]
