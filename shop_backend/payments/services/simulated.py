# payments/services/simulated.py

"""
SIMULATED PAYMENT PROVIDER

Stands in for a card processor during development:
- create_payment_intent: returns a "pi_sim_" intent id + client secret
- confirm_payment:       every well-formed simulated intent succeeds
- payment_config:        public key + currency for the checkout client

Nothing here touches orders. The checkout client confirms the intent and
then calls POST /api/orders/{id}/pay/ with the returned reference.
"""

from __future__ import annotations

import logging
import secrets
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

INTENT_PREFIX = "pi_sim_"
DEFAULT_PUBLISHABLE_KEY = "pk_test_simulated_key_for_development"


class PaymentError(Exception):
    pass


class InvalidAmountError(PaymentError):
    pass


class InvalidPaymentIntentError(PaymentError):
    pass


def _simulated_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get("SIMULATED") if isinstance(payments, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def _currency() -> str:
    return (_simulated_cfg().get("CURRENCY") or "inr").strip().lower()


def _new_intent_id() -> str:
    millis = int(timezone.now().timestamp() * 1000)
    return f"{INTENT_PREFIX}{millis}_{secrets.token_hex(4)}"


def _whole_amount(amount) -> int:
    if amount is None or amount == "" or isinstance(amount, bool):
        raise InvalidAmountError("Invalid amount")

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError("Invalid amount")

    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("Invalid amount")

    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def payment_config() -> dict:
    return {
        "publishable_key": _simulated_cfg().get("PUBLISHABLE_KEY") or DEFAULT_PUBLISHABLE_KEY,
        "currency": _currency(),
        "simulated": True,
        "message": "Using simulated payment system",
    }


def create_payment_intent(*, amount) -> dict:
    whole = _whole_amount(amount)
    intent_id = _new_intent_id()

    logger.info(
        "Simulated payment intent created",
        extra={"payment_intent_id": intent_id, "amount": whole},
    )

    return {
        "client_secret": f"{intent_id}_secret_{secrets.token_hex(4)}",
        "payment_intent_id": intent_id,
        "amount": whole,
        "currency": _currency(),
        "status": "requires_payment_method",
        "simulated": True,
        "message": "This is a simulated payment - no real transaction will occur",
    }


def confirm_payment(*, payment_intent_id: str | None) -> dict:
    intent_id = (payment_intent_id or "").strip()
    if not intent_id.startswith(INTENT_PREFIX):
        logger.warning(
            "Rejected confirmation for non-simulated intent",
            extra={"payment_intent_id": intent_id},
        )
        raise InvalidPaymentIntentError("Invalid payment intent ID")

    logger.info("Simulated payment confirmed", extra={"payment_intent_id": intent_id})

    return {
        "success": True,
        "payment_intent_id": intent_id,
        "status": "succeeded",
        "update_time": timezone.now().isoformat(),
        "simulated": True,
        "message": "Payment simulated successfully",
    }
