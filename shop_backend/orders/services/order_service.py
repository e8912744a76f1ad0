# orders/services/order_service.py

"""
ORDER SERVICE (ORDER LIFECYCLE MANAGER)

Purpose:
- Create orders and reserve their stock.
- Confirm payment, apply admin status overrides.
- Run the hybrid customer cancellation flow and the admin decision on
  cancel requests, restoring stock exactly once per released reservation.
- Owner / admin scoped reads.

Hard rules:
- Every mutation runs inside one DB transaction and loads the order with
  select_for_update(), so concurrent calls on one order serialize and the
  loser re-evaluates the lifecycle rules against committed state.
- Stock is only touched through products.services.catalog.adjust_stock
  (conditional UPDATE, never read-modify-write).
- Creation and reservation commit together or not at all.
- Transition legality lives in orders.services.order_lifecycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from orders.models import Order, OrderItem
from orders.services import order_lifecycle
from orders.services.exceptions import (
    FatalConsistencyError,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    OrderValidationError,
)
from orders.services.order_lifecycle import CancelDecision, CancelOutcome
from permissions.roles import is_admin
from products.services import catalog

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

AMOUNT_FIELDS = ("items_total", "tax", "shipping", "grand_total")

ADDRESS_FIELDS = ("name", "phone", "street", "city", "state", "zip_code", "country")


@dataclass(frozen=True)
class CancelResult:
    direct_cancel: bool
    order: Order


# ============================================================
# INPUT NORMALIZATION
# ============================================================

def _money(value, *, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, bool):
        raise OrderValidationError(f"{field} must be a decimal amount")

    try:
        amount = Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise OrderValidationError(f"{field} must be a decimal amount")

    if not amount.is_finite():
        raise OrderValidationError(f"{field} must be a decimal amount")

    if amount < 0:
        raise OrderValidationError(f"{field} cannot be negative")

    return amount


def _to_int_qty(value, *, label: str) -> int:
    if isinstance(value, bool):
        raise OrderValidationError(f"Quantity for {label} must be a whole number")

    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())

    if not isinstance(value, int):
        raise OrderValidationError(f"Quantity for {label} must be a whole number")

    if value < 1:
        raise OrderValidationError(f"Quantity for {label} must be at least 1")

    return value


def _normalize_amounts(amounts) -> dict:
    if not isinstance(amounts, dict):
        raise OrderValidationError("amounts must be an object")
    return {field: _money(amounts.get(field), field=field) for field in AMOUNT_FIELDS}


def _normalize_address(address) -> dict:
    if not isinstance(address, dict):
        raise OrderValidationError("shipping_address must be an object")
    return {field: str(address.get(field) or "").strip() for field in ADDRESS_FIELDS}


def _normalize_line_items(line_items) -> list[dict]:
    if not line_items:
        raise OrderValidationError("No order items")

    normalized = []
    for index, raw in enumerate(line_items):
        if not isinstance(raw, dict):
            raise OrderValidationError(f"Order item #{index + 1} must be an object")

        product_id = raw.get("product")
        if not product_id:
            raise OrderValidationError(f"Order item #{index + 1} has no product")

        label = str(raw.get("name") or f"item #{index + 1}")
        normalized.append(
            {
                "product_id": product_id,
                "name": raw.get("name"),
                "quantity": _to_int_qty(raw.get("quantity"), label=label),
                "unit_price": raw.get("unit_price"),
                "image": raw.get("image"),
            }
        )
    return normalized


# ============================================================
# LOADING
# ============================================================

def _lock_order(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError("Order not found")


def _read_order(order_id) -> Order:
    try:
        return (
            Order.objects.select_related("owner")
            .prefetch_related("items")
            .get(pk=order_id)
        )
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError("Order not found")


# ============================================================
# STOCK COORDINATION
# ============================================================

def _quantities_by_product(pairs) -> dict[str, int]:
    """
    Sum quantities per product and order by product id, so every
    transaction touches product rows in the same sequence.
    """
    totals: dict[str, int] = {}
    for product_id, quantity in pairs:
        key = str(product_id)
        totals[key] = totals.get(key, 0) + int(quantity)
    return dict(sorted(totals.items()))


def _reserve_stock(items: list[OrderItem]) -> None:
    names = {}
    for item in items:
        names.setdefault(str(item.product_id), item.name)

    required = _quantities_by_product((item.product_id, item.quantity) for item in items)

    for product_id, quantity in required.items():
        try:
            catalog.adjust_stock(product_id, -quantity)
        except catalog.InsufficientStockError as exc:
            raise InsufficientStockError(
                f"Insufficient stock for {names[product_id]}. Available: {exc.available}"
            ) from exc
        except catalog.ProductNotFoundError as exc:
            raise NotFoundError(f"Product {names[product_id]} not found") from exc


def _record_consistency_failure(order: Order, item: OrderItem, reason: str) -> None:
    err = FatalConsistencyError(
        f"Could not restore {item.quantity} unit(s) of '{item.name}' for order {order.id}: {reason}"
    )
    logger.error(
        str(err),
        extra={
            "code": err.code,
            "order_id": str(order.id),
            "order_item_id": item.pk,
            "product_id": str(item.product_id) if item.product_id else None,
            "quantity": item.quantity,
        },
    )


def _restore_reserved_stock(order: Order) -> bool:
    """
    Give every line item's quantity back to its product and stamp
    order.stock_released_at (the caller saves it with the transition).

    The order must be row-locked. A reservation that was already released
    is left alone and False is returned, so an order that re-enters a
    cancellable state (payment after a cancel, admin override back to
    pending) can never return its stock twice.

    A product that no longer exists cannot take its stock back: that is
    logged as a consistency failure and the order transition still stands.
    """
    if order.stock_released_at is not None:
        logger.warning(
            "Order stock already released; skipping restoration",
            extra={
                "order_id": str(order.id),
                "stock_released_at": order.stock_released_at.isoformat(),
            },
        )
        return False

    restorable = []
    for item in order.items.all():
        if item.product_id is None:
            _record_consistency_failure(order, item, "product no longer exists")
            continue
        restorable.append(item)

    by_product = {}
    for item in restorable:
        by_product.setdefault(str(item.product_id), []).append(item)

    for product_id, quantity in _quantities_by_product(
        (item.product_id, item.quantity) for item in restorable
    ).items():
        try:
            catalog.adjust_stock(product_id, quantity)
        except catalog.ProductNotFoundError:
            for item in by_product[product_id]:
                _record_consistency_failure(order, item, "product no longer exists")

    order.stock_released_at = timezone.now()

    logger.info(
        "Order stock restored",
        extra={"order_id": str(order.id), "items": len(restorable)},
    )
    return True


# ============================================================
# CREATE
# ============================================================

@transaction.atomic
def create_order(*, owner, line_items, shipping_address, amounts) -> Order:
    """
    Persist a new pending, unpaid order and reserve stock for it.

    GUARANTEES:
    - Every product exists and has enough stock, checked before anything is written
    - Reservation is a conditional decrement per product; losing a race to
      another order raises InsufficientStockError and rolls back everything
    - No partial order, no partial reservation
    """
    items_in = _normalize_line_items(line_items)
    address = _normalize_address(shipping_address)
    totals = _normalize_amounts(amounts)

    # Availability check (whole order, summed per product)
    products = {}
    for raw in items_in:
        label = raw["name"] or str(raw["product_id"])
        try:
            products[raw["product_id"]] = catalog.find_product(raw["product_id"])
        except catalog.ProductNotFoundError:
            raise NotFoundError(f"Product {label} not found")

    requested = _quantities_by_product(
        (products[raw["product_id"]].pk, raw["quantity"]) for raw in items_in
    )
    for raw in items_in:
        product = products[raw["product_id"]]
        if product.stock < requested[str(product.pk)]:
            label = raw["name"] or product.name
            raise InsufficientStockError(
                f"Insufficient stock for {label}. Available: {product.stock}"
            )

    order = Order.objects.create(
        owner=owner,
        shipping_address=address,
        status=Order.Status.PENDING,
        is_paid=False,
        **totals,
    )

    items = []
    for position, raw in enumerate(items_in):
        product = products[raw["product_id"]]
        images = product.images or []
        unit_price = (
            product.price
            if raw["unit_price"] in (None, "")
            else _money(raw["unit_price"], field="unit_price")
        )
        items.append(
            OrderItem(
                order=order,
                product=product,
                position=position,
                name=raw["name"] or product.name,
                quantity=raw["quantity"],
                unit_price=unit_price,
                image=raw["image"] or (images[0] if images else ""),
            )
        )
    OrderItem.objects.bulk_create(items)

    _reserve_stock(items)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "owner_id": str(owner.pk),
            "items": len(items),
            "grand_total": str(order.grand_total),
        },
    )
    return order


# ============================================================
# PAYMENT
# ============================================================

@transaction.atomic
def mark_paid(*, order_id, payment_reference) -> Order:
    """
    Confirm payment: is_paid -> True, paid_at stamped, status -> processing.

    Confirming an already-paid order is a no-op that returns it unchanged.
    """
    order = _lock_order(order_id)

    if order.is_paid:
        logger.info(
            "Payment already confirmed; ignoring repeat confirmation",
            extra={"order_id": str(order.id)},
        )
        return order

    if order.status == Order.Status.CANCELLED:
        logger.warning(
            "Payment confirmed for a cancelled order; status moves to processing",
            extra={"order_id": str(order.id)},
        )

    order.is_paid = True
    order.paid_at = timezone.now()
    order.payment_reference = payment_reference or None
    order.status = Order.Status.PROCESSING
    order.save(
        update_fields=["is_paid", "paid_at", "payment_reference", "status", "updated_at"]
    )

    logger.info("Order paid", extra={"order_id": str(order.id)})
    return order


# ============================================================
# ADMIN STATUS OVERRIDE
# ============================================================

@transaction.atomic
def set_status(*, order_id, status: str) -> Order:
    """
    Administrative override: any status to any admin-settable status.

    Setting "cancelled" here does NOT release the order's stock; the
    cancel request flow is the only path that restores it.
    """
    target = order_lifecycle.validate_admin_status(target_status=status)
    order = _lock_order(order_id)
    previous = order.status

    if target == Order.Status.CANCELLED and previous != Order.Status.CANCELLED:
        logger.warning(
            "Order force-cancelled by admin without stock restoration",
            extra={"order_id": str(order.id), "previous_status": previous},
        )

    order.status = target
    update_fields = ["status", "updated_at"]

    if target == Order.Status.DELIVERED:
        order.is_delivered = True
        order.delivered_at = timezone.now()
        update_fields += ["is_delivered", "delivered_at"]

    order.save(update_fields=update_fields)

    logger.info(
        "Order status set",
        extra={"order_id": str(order.id), "from": previous, "to": target},
    )
    return order


# ============================================================
# CUSTOMER CANCELLATION
# ============================================================

@transaction.atomic
def request_cancel(*, order_id, caller, reason: str | None = None) -> CancelResult:
    """
    Hybrid cancellation by the order's owner.

    - pending:    cancelled immediately, stock restored
    - processing: cancel_requested, stock stays reserved until an admin decides
    - anything else is rejected by the lifecycle rules
    """
    order = _lock_order(order_id)

    if caller is None or order.owner_id != caller.pk:
        raise ForbiddenError("Not authorized to cancel this order")

    outcome = order_lifecycle.resolve_cancel(current_status=order.status)
    reason = (reason or "").strip() or order_lifecycle.default_cancel_reason(outcome)

    if outcome == CancelOutcome.DIRECT:
        _restore_reserved_stock(order)
        order.status = Order.Status.CANCELLED
        order.cancel_reason = reason
        order.save(
            update_fields=["status", "cancel_reason", "stock_released_at", "updated_at"]
        )

        logger.info("Order cancelled by owner", extra={"order_id": str(order.id)})
        return CancelResult(direct_cancel=True, order=order)

    order.status = Order.Status.CANCEL_REQUESTED
    order.cancel_reason = reason
    order.cancel_requested_at = timezone.now()
    order.save(
        update_fields=["status", "cancel_reason", "cancel_requested_at", "updated_at"]
    )

    logger.info("Order cancel requested", extra={"order_id": str(order.id)})
    return CancelResult(direct_cancel=False, order=order)


# ============================================================
# ADMIN DECISION ON CANCEL REQUESTS
# ============================================================

@transaction.atomic
def approve_cancel_request(*, order_id) -> Order:
    order = _lock_order(order_id)
    target = order_lifecycle.resolve_cancel_decision(
        current_status=order.status,
        decision=CancelDecision.APPROVE,
    )

    _restore_reserved_stock(order)

    order.status = target
    order.save(update_fields=["status", "stock_released_at", "updated_at"])

    logger.info("Cancel request approved", extra={"order_id": str(order.id)})
    return order


@transaction.atomic
def reject_cancel_request(*, order_id) -> Order:
    order = _lock_order(order_id)
    target = order_lifecycle.resolve_cancel_decision(
        current_status=order.status,
        decision=CancelDecision.REJECT,
    )

    order.status = target
    order.cancel_reason = None
    order.cancel_requested_at = None
    order.save(
        update_fields=["status", "cancel_reason", "cancel_requested_at", "updated_at"]
    )

    logger.info("Cancel request rejected", extra={"order_id": str(order.id)})
    return order


# ============================================================
# READS
# ============================================================

def get_order(*, order_id, caller) -> Order:
    order = _read_order(order_id)

    if order.owner_id != getattr(caller, "pk", None) and not is_admin(caller):
        raise ForbiddenError("Not authorized to view this order")

    return order


def list_own_orders(*, owner):
    return (
        Order.objects.filter(owner=owner)
        .prefetch_related("items")
        .order_by("-created_at")
    )


def list_all_orders():
    return (
        Order.objects.select_related("owner")
        .prefetch_related("items")
        .order_by("-created_at")
    )
