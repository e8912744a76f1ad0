# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Represents a sellable catalog item.

    STOCK MODEL (IMPORTANT):
    - Product stores its own sellable stock counter
    - The counter is service-managed: only products.services.catalog.adjust_stock
      mutates it once the product exists
    - The database refuses negative stock
    """

    class Category(models.TextChoices):
        LAPTOPS = "Laptops", "Laptops"
        SMARTPHONES = "Smartphones", "Smartphones"
        TABLETS = "Tablets", "Tablets"
        ACCESSORIES = "Accessories", "Accessories"
        SMART_WATCHES = "Smart Watches", "Smart Watches"
        HEADPHONES = "Headphones", "Headphones"
        CAMERAS = "Cameras", "Cameras"
        GAMING = "Gaming", "Gaming"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField()
    brand = models.CharField(max_length=120)

    category = models.CharField(max_length=32, choices=Category.choices)

    price = models.DecimalField(max_digits=12, decimal_places=2)
    original_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="List price before discount (0 when not discounted).",
    )

    # Image URLs only; upload/hosting lives outside this backend
    images = models.JSONField(default=list, blank=True)
    specifications = models.JSONField(default=dict, blank=True)

    stock = models.PositiveIntegerField(default=0)

    is_featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"], name="products_pr_categor_3f1c2a_idx"),
            models.Index(fields=["brand"], name="products_pr_brand_8d4e71_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock__gte=0),
                name="product_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.brand})"

    def clean(self):
        if self.price is None or Decimal(self.price) < 0:
            raise ValidationError("Price cannot be negative")

        if self.original_price is not None and Decimal(self.original_price) < 0:
            raise ValidationError("original_price cannot be negative")

        if not isinstance(self.images, list):
            raise ValidationError("images must be a list of URLs")

    @property
    def in_stock(self) -> bool:
        return int(self.stock or 0) > 0
