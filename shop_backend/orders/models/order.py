# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class Order(models.Model):
    """
    One storefront purchase.

    Key rules:
    - Line items, shipping address and amounts are written once at creation
    - status / payment / delivery / cancellation fields are owned by
      orders.services.order_service and never edited from views or admin
    - Stock for every line item is reserved at creation and released at most
      once (direct cancel or approved cancel request)
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        SHIPPED = "shipped", "Shipped"
        DELIVERED = "delivered", "Delivered"
        CANCELLED = "cancelled", "Cancelled"
        CANCEL_REQUESTED = "cancel_requested", "Cancel Requested"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # {name, phone, street, city, state, zip_code, country}
    shipping_address = models.JSONField(default=dict)

    # Money fields (computed by the checkout client, stored verbatim)
    items_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    tax = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    shipping = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    grand_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING,
    )

    # Payment
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_reference = models.JSONField(
        null=True,
        blank=True,
        help_text="Opaque provider record: id, status, update_time, email_address.",
    )

    # Delivery
    is_delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)

    # Cancellation
    cancel_reason = models.TextField(null=True, blank=True)
    cancel_requested_at = models.DateTimeField(null=True, blank=True)

    # Set when the reservation is given back to the catalog; a reservation
    # is released at most once per order
    stock_released_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_orde_status_a1d7e2_idx"),
            models.Index(fields=["owner", "created_at"], name="orders_orde_owner_i_5c0b94_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(items_total__gte=0)
                & Q(tax__gte=0)
                & Q(shipping__gte=0)
                & Q(grand_total__gte=0),
                name="order_amounts_non_negative",
            ),
        ]

    def __str__(self):
        return f"Order {self.id} | {self.grand_total} | {self.status}"
