# products/serializers/product.py

"""
PRODUCT SERIALIZERS

Purpose:
- Canonical Product serializer for both admin and public storefront.
- stock is writable on create only; afterwards it moves through
  products.services.catalog.adjust_stock (see StockAdjustmentSerializer).
"""

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "brand",
            "category",
            "price",
            "original_price",
            "images",
            "specifications",
            "stock",
            "in_stock",
            "is_featured",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "in_stock",
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Price must be non-negative")
        return value

    def validate_original_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("original_price must be non-negative")
        return value

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("images must be a list of URL strings")
        return value

    def validate_specifications(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("specifications must be an object")
        return {str(k): str(v) for k, v in value.items()}

    def validate_stock(self, value):
        # Existing products change stock only through adjust_stock
        if self.instance is not None and value != self.instance.stock:
            raise serializers.ValidationError(
                "Stock cannot be edited directly. Use the adjust-stock endpoint."
            )
        return value


class StockAdjustmentSerializer(serializers.Serializer):
    """
    Input for POST /api/products/{id}/adjust-stock/
    """

    delta = serializers.IntegerField()

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("delta cannot be 0")
        return value
