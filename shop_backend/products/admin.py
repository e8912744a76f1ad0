# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:

- Products are created with an initial stock level.
- After creation, stock is read-only here: changes go through the
  catalog service (POST /api/products/{id}/adjust-stock/) so that
  concurrent order reservations are never overwritten.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "brand",
        "category",
        "price",
        "stock",
        "is_featured",
        "is_active",
        "updated_at",
    )
    list_filter = ("category", "brand", "is_featured", "is_active")
    search_fields = ("name", "brand", "description")
    ordering = ("-created_at",)

    def get_readonly_fields(self, request, obj=None):
        ro = ["created_at", "updated_at"]
        if obj is not None:
            ro.append("stock")
        return ro
