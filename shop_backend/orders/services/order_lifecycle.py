"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth

Paths into the state machine:
- payment confirmation: any status -> processing
- admin status override: any status -> ADMIN_SETTABLE_STATUSES
- customer cancel: keyed by current status (CANCEL_REJECTIONS / CANCEL_OUTCOMES)
- admin decision on a cancel request: cancel_requested -> cancelled | processing
"""

from __future__ import annotations

from enum import Enum

from orders.models import Order
from orders.services.exceptions import InvalidTransitionError, OrderValidationError

Status = Order.Status


# ============================================================
# STATE DEFINITIONS
# ============================================================

# cancel_requested is entered only through the customer cancel flow
ADMIN_SETTABLE_STATUSES = {
    Status.PENDING,
    Status.PROCESSING,
    Status.SHIPPED,
    Status.DELIVERED,
    Status.CANCELLED,
}


class CancelOutcome(str, Enum):
    DIRECT = "direct"        # restore stock now, status -> cancelled
    REQUEST = "request"      # status -> cancel_requested, stock stays reserved


class CancelDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


CANCEL_REJECTIONS = {
    Status.CANCELLED: "Order is already cancelled",
    Status.CANCEL_REQUESTED: "Cancel request is already pending admin approval",
    Status.DELIVERED: "Delivered orders cannot be cancelled",
    Status.SHIPPED: "Shipped orders cannot be cancelled. Please contact support.",
}

CANCEL_OUTCOMES = {
    Status.PENDING: CancelOutcome.DIRECT,
    Status.PROCESSING: CancelOutcome.REQUEST,
}

DEFAULT_CANCEL_REASONS = {
    CancelOutcome.DIRECT: "Cancelled by user",
    CancelOutcome.REQUEST: "Cancellation requested by user",
}

# cancel_requested is a single-exit state: one decision, one target
CANCEL_DECISION_TARGETS = {
    CancelDecision.APPROVE: Status.CANCELLED,
    CancelDecision.REJECT: Status.PROCESSING,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def resolve_cancel(*, current_status: str) -> CancelOutcome:
    """
    Decide what a customer cancel does from the given status.
    Raises InvalidTransitionError when cancellation is not allowed.
    """
    rejection = CANCEL_REJECTIONS.get(current_status)
    if rejection is not None:
        raise InvalidTransitionError(rejection, current_status=current_status)

    outcome = CANCEL_OUTCOMES.get(current_status)
    if outcome is None:
        raise InvalidTransitionError(
            f"Order cannot be cancelled from status '{current_status}'",
            current_status=current_status,
        )
    return outcome


def default_cancel_reason(outcome: CancelOutcome) -> str:
    return DEFAULT_CANCEL_REASONS[outcome]


def resolve_cancel_decision(*, current_status: str, decision: CancelDecision) -> str:
    """
    Target status for an admin decision on a cancel request.
    Only valid while a request is pending.
    """
    if current_status != Status.CANCEL_REQUESTED:
        raise InvalidTransitionError(
            f"No cancel request pending for this order (current status: {current_status})",
            current_status=current_status,
        )
    return CANCEL_DECISION_TARGETS[decision]


def validate_admin_status(*, target_status: str) -> str:
    """
    Admin override accepts any status in ADMIN_SETTABLE_STATUSES,
    regardless of the current one.
    """
    if target_status not in ADMIN_SETTABLE_STATUSES:
        allowed = ", ".join(sorted(ADMIN_SETTABLE_STATUSES))
        raise OrderValidationError(
            f"Invalid status '{target_status}'. Allowed: {allowed}"
        )
    return target_status
