# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


# ======================================================
# ORDER ADMIN (READ-ONLY LIFECYCLE)
# ======================================================
# Lifecycle changes go through the order service (API actions) so that
# stock reservations stay consistent; the admin site only inspects.


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "name", "quantity", "unit_price", "image")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "owner",
        "status",
        "grand_total",
        "is_paid",
        "is_delivered",
        "created_at",
    )
    list_filter = ("status", "is_paid", "is_delivered", "created_at")
    search_fields = ("id", "owner__email")
    inlines = [OrderItemInline]

    readonly_fields = (
        "owner",
        "shipping_address",
        "items_total",
        "tax",
        "shipping",
        "grand_total",
        "status",
        "is_paid",
        "paid_at",
        "payment_reference",
        "is_delivered",
        "delivered_at",
        "cancel_reason",
        "cancel_requested_at",
        "stock_released_at",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
