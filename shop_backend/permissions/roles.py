# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
# Storefront has exactly two roles:
# - user:  customer who browses, buys and tracks own orders
# - admin: manages the catalog and fulfils / cancels orders
ROLE_USER = "user"
ROLE_ADMIN = "admin"

ROLES = {
    ROLE_USER,
    ROLE_ADMIN,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views should protect capabilities, not raw roles.
CAP_CATALOG_EDIT = "catalog.edit"

CAP_ORDERS_PLACE = "orders.place"
CAP_ORDERS_VIEW_ALL = "orders.view_all"
CAP_ORDERS_FULFIL = "orders.fulfil"           # admin status override
CAP_ORDERS_DECIDE_CANCEL = "orders.decide_cancel"  # approve / reject cancel requests

ALL_CAPABILITIES = {
    CAP_CATALOG_EDIT,
    CAP_ORDERS_PLACE,
    CAP_ORDERS_VIEW_ALL,
    CAP_ORDERS_FULFIL,
    CAP_ORDERS_DECIDE_CANCEL,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_USER: {
        CAP_ORDERS_PLACE,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def is_admin(user) -> bool:
    return bool(user) and get_user_role(user) == ROLE_ADMIN


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


# =========================================================
# Capability Permission
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_ORDERS_FULFIL
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return required in capabilities_for(user)
