"""
pricing.py
Shipping fee estimate, payment balance, and status classification.

All money math uses Decimal; nothing here is rounded. Values are rounded
only when formatted for display (see utils.format_currency).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum

RATE_PER_POUND = Decimal("3")
DECLARED_VALUE_RATE = Decimal("0.02")
TAX_RATE = Decimal("0.10")

ZERO = Decimal("0")

# Largest form input priced; anything beyond counts as unparsable
MAX_INPUT = Decimal("1e12")

_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

AUTO = "auto"
MANUAL = "manual"
PRICING_MODES = (AUTO, MANUAL)


def to_decimal(value, limit: Decimal = MAX_INPUT) -> Decimal:
    """
    Parse form/API input into a Decimal.

    Text is read up to the first non-numeric character, so "10 lbs" is 10.
    Blank, None, text with no leading number, NaN, infinities and anything
    larger than `limit` in magnitude all become 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        match = _NUMBER_PREFIX.match(str(value).strip())
        if not match:
            return ZERO
        try:
            result = Decimal(match.group())
        except InvalidOperation:
            return ZERO
    if not result.is_finite() or result.copy_abs() > limit:
        return ZERO
    return result


# ---------- Fee estimator ----------

@dataclass(frozen=True)
class Quote:
    mode: str
    shipping_fee: Decimal
    discount: Decimal
    tax_amount: Decimal
    total: Decimal
    # Auto mode breakdown (0 in manual mode)
    weight_charge: Decimal = ZERO
    value_charge: Decimal = ZERO


def estimate_auto(weight, declared_value) -> Quote:
    weight_charge = to_decimal(weight) * RATE_PER_POUND
    value_charge = to_decimal(declared_value) * DECLARED_VALUE_RATE
    shipping_fee = weight_charge + value_charge
    tax_amount = shipping_fee * TAX_RATE
    return Quote(
        mode=AUTO,
        shipping_fee=shipping_fee,
        discount=ZERO,
        tax_amount=tax_amount,
        total=shipping_fee + tax_amount,
        weight_charge=weight_charge,
        value_charge=value_charge,
    )


def estimate_manual(shipping_fee=None, discount=None, tax_amount=None) -> Quote:
    """
    Operator-entered pricing. Negative input and a discount larger than
    fee + tax are accepted; the total is not clamped.
    """
    fee = to_decimal(shipping_fee)
    disc = to_decimal(discount)
    tax = to_decimal(tax_amount)
    return Quote(
        mode=MANUAL,
        shipping_fee=fee,
        discount=disc,
        tax_amount=tax,
        total=fee - disc + tax,
    )


def estimate(
    mode: str,
    *,
    weight=None,
    declared_value=None,
    shipping_fee=None,
    discount=None,
    tax_amount=None,
) -> Quote:
    if mode == AUTO:
        return estimate_auto(weight, declared_value)
    if mode == MANUAL:
        return estimate_manual(shipping_fee, discount, tax_amount)
    raise ValueError(f"Unknown pricing mode: {mode!r}")


# ---------- Balance calculator ----------

@dataclass(frozen=True)
class Balance:
    total_amount: Decimal
    total_paid: Decimal
    balance: Decimal

    @property
    def is_settled(self) -> bool:
        return self.balance <= ZERO


def _payment_amount(payment) -> Decimal:
    if isinstance(payment, Mapping):
        return to_decimal(payment.get("amount"))
    return to_decimal(getattr(payment, "amount", None))


def compute_balance(total_amount, payments: Iterable = ()) -> Balance:
    total = to_decimal(total_amount)
    paid = sum((_payment_amount(p) for p in payments), ZERO)
    return Balance(total_amount=total, total_paid=paid, balance=total - paid)


# ---------- Status classifier ----------

class StatusCategory(str, Enum):
    WAITING = "waiting"
    IN_TRANSIT = "in_transit"
    ARRIVED = "arrived"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"
    NEUTRAL = "neutral"


CATEGORY_COLORS = {
    StatusCategory.WAITING: "#ca8a04",
    StatusCategory.IN_TRANSIT: "#2563eb",
    StatusCategory.ARRIVED: "#16a34a",
    StatusCategory.READY: "#059669",
    StatusCategory.COMPLETED: "#4b5563",
    StatusCategory.CANCELLED: "#dc2626",
    StatusCategory.PARTIAL: "#ea580c",
    StatusCategory.PAID: "#16a34a",
    StatusCategory.REFUNDED: "#4b5563",
    StatusCategory.NEUTRAL: "#6b7280",
}

PARCEL_STATUS_CATEGORIES = {
    "PENDING": StatusCategory.WAITING,
    "IN_TRANSIT_USA": StatusCategory.IN_TRANSIT,
    "DEPARTED_USA": StatusCategory.IN_TRANSIT,
    "ARRIVED_MIAMI": StatusCategory.IN_TRANSIT,
    "IN_TRANSIT_HAITI": StatusCategory.IN_TRANSIT,
    "ARRIVED_HAITI": StatusCategory.ARRIVED,
    "READY_FOR_PICKUP": StatusCategory.READY,
    "PICKED_UP": StatusCategory.COMPLETED,
    "DELIVERED": StatusCategory.COMPLETED,
    "CANCELLED": StatusCategory.CANCELLED,
}

PAYMENT_STATUS_CATEGORIES = {
    "PENDING": StatusCategory.WAITING,
    "PARTIAL": StatusCategory.PARTIAL,
    "PAID": StatusCategory.PAID,
    "REFUNDED": StatusCategory.REFUNDED,
}


def _token(status) -> str:
    return str(status or "").strip().upper()


def classify_parcel_status(status) -> StatusCategory:
    return PARCEL_STATUS_CATEGORIES.get(_token(status), StatusCategory.NEUTRAL)


def classify_payment_status(status) -> StatusCategory:
    return PAYMENT_STATUS_CATEGORIES.get(_token(status), StatusCategory.NEUTRAL)


def category_color(category: StatusCategory) -> str:
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[StatusCategory.NEUTRAL])


def is_in_transit(status) -> bool:
    return "TRANSIT" in _token(status)


def is_delivered(status) -> bool:
    return _token(status) == "DELIVERED"
