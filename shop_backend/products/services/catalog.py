# products/services/catalog.py

"""
CATALOG STORE SERVICE

Purpose:
- Single read entry point for products used by other domains (find_product).
- Single write entry point for the stock counter (adjust_stock).

Rules:
- adjust_stock is ONE conditional UPDATE relative to the current stock:
    UPDATE ... SET stock = stock + delta WHERE id = ? AND stock >= -delta
  so concurrent reservations never underflow and never lose updates.
- A failed adjustment changes nothing and says why (not found vs insufficient).
- No read-modify-write of Product.stock anywhere else in the codebase.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from products.models import Product

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class CatalogError(Exception):
    pass


class ProductNotFoundError(CatalogError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class InsufficientStockError(CatalogError):
    def __init__(self, product_id, *, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Requested: {requested}, Available: {available}"
        )


# ============================================================
# READS
# ============================================================

def find_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValidationError, ValueError, TypeError):
        # malformed ids behave like missing ones
        raise ProductNotFoundError(product_id)


# ============================================================
# STOCK COUNTER
# ============================================================

def adjust_stock(product_id, delta: int) -> int:
    """
    Atomically apply delta to a product's stock and return the new level.

    delta < 0 reserves stock (order creation).
    delta > 0 releases stock (cancellation / approved cancel request).

    Raises:
    - ProductNotFoundError if the product does not exist
    - InsufficientStockError if a reservation would take stock below zero
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise TypeError("delta must be an integer")

    if delta == 0:
        return find_product(product_id).stock

    updated = Product.objects.filter(pk=product_id, stock__gte=-delta).update(
        stock=F("stock") + delta,
        updated_at=timezone.now(),
    )

    if not updated:
        current = (
            Product.objects.filter(pk=product_id)
            .values_list("stock", flat=True)
            .first()
        )
        if current is None:
            raise ProductNotFoundError(product_id)

        logger.info(
            "Stock reservation refused",
            extra={
                "product_id": str(product_id),
                "requested": -delta,
                "available": current,
            },
        )
        raise InsufficientStockError(product_id, requested=-delta, available=current)

    new_stock = Product.objects.values_list("stock", flat=True).get(pk=product_id)

    logger.debug(
        "Stock adjusted",
        extra={"product_id": str(product_id), "delta": delta, "stock": new_stock},
    )
    return new_stock
