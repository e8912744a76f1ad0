# users/admin.py

"""
USERS ADMIN (STOREFRONT ACCOUNTS)

Customers and admins share one model, split by `role`.

- List shows each account's order count (annotated, sortable)
- Change page shows the account's orders read-only; lifecycle changes go
  through the order API, never through this page
- Access is role-based: groups / per-user permissions are not used
- Admin-role accounts are always kept staff so they can sign in here
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.db.models import Count

from orders.models import Order
from permissions.roles import ROLE_ADMIN

User = get_user_model()


class CustomerOrderInline(admin.TabularInline):
    model = Order
    fk_name = "owner"
    extra = 0
    can_delete = False
    show_change_link = True
    fields = ("status", "grand_total", "is_paid", "is_delivered", "created_at")
    readonly_fields = fields
    ordering = ("-created_at",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "full_name", "role", "order_count", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("email", "first_name", "last_name")
    readonly_fields = ("created_at", "updated_at", "last_login")
    filter_horizontal = ()
    inlines = [CustomerOrderInline]

    fieldsets = (
        ("Account", {"fields": ("email", "password")}),
        ("Profile", {"fields": ("first_name", "last_name")}),
        ("Access", {"fields": ("role", "is_active", "is_staff", "is_superuser")}),
        ("Activity", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "role", "is_active"),
            },
        ),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(order_count=Count("orders"))

    @admin.display(description="Name")
    def full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}".strip() or "-"

    @admin.display(description="Orders", ordering="order_count")
    def order_count(self, obj):
        return getattr(obj, "order_count", 0)

    def save_model(self, request, obj, form, change):
        if obj.role == ROLE_ADMIN:
            obj.is_staff = True
        super().save_model(request, obj, form, change)
