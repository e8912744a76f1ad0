from .catalog import (
    CatalogError,
    InsufficientStockError,
    ProductNotFoundError,
    adjust_stock,
    find_product,
)

__all__ = [
    "CatalogError",
    "InsufficientStockError",
    "ProductNotFoundError",
    "adjust_stock",
    "find_product",
]
