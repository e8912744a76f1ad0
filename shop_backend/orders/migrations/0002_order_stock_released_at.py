"""
======================================================
PATH: orders/migrations/0002_order_stock_released_at.py
======================================================
MIGRATION: track when an order's stock reservation was released
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="order",
            name="stock_released_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]
