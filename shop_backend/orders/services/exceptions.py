# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for the order lifecycle.

Every error carries:
- code:        stable machine-readable identifier for API clients
- http_status: status the API layer answers with
"""

from rest_framework import status


class OrderError(Exception):
    """Base exception for all order lifecycle rejections."""

    code = "ORDER_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST


class OrderValidationError(OrderError):
    """Malformed or empty input; rejected before any state change."""

    code = "VALIDATION_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST


class NotFoundError(OrderError):
    """Referenced order or product does not exist."""

    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class InsufficientStockError(OrderError):
    """Requested quantity exceeds available stock; whole order rejected."""

    code = "INSUFFICIENT_STOCK"
    http_status = status.HTTP_409_CONFLICT


class ForbiddenError(OrderError):
    """Caller may not act on this order."""

    code = "FORBIDDEN"
    http_status = status.HTTP_403_FORBIDDEN


class InvalidTransitionError(OrderError):
    """Requested transition is not legal from the order's current status."""

    code = "INVALID_TRANSITION"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, current_status: str | None = None):
        self.current_status = current_status
        super().__init__(message)


class FatalConsistencyError(OrderError):
    """
    A stock restoration could not be applied after the order's new state
    was already decided (e.g. the product was deleted).

    Never raised to callers: the order write stands and this is logged.
    """

    code = "STOCK_CONSISTENCY"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
