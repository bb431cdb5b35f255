"""
utils.py
Formatting, form validation, page helpers and CSV exports.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import pandas as pd

import pricing
from models import Customer, Parcel, Payment, RevenueReport

# Consolidation warehouse every customer's customAddress is shipped to
WAREHOUSE_ADDRESS = "7829 NW 72nd Ave"
WAREHOUSE_CITY = "Miami"
WAREHOUSE_STATE = "FL"
WAREHOUSE_ZIP = "33166"

MIN_CODE_SEARCH_LENGTH = 2

CENT = Decimal("0.01")
# Larger amounts display as 0
DISPLAY_LIMIT = Decimal("1e18")


def parse_number(value) -> Decimal:
    return pricing.to_decimal(value)


def format_currency(amount) -> str:
    value = pricing.to_decimal(amount, limit=DISPLAY_LIMIT).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _as_datetime(value) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value) -> str:
    d = _as_datetime(value)
    return d.strftime("%B %d, %Y") if d else "—"


def format_datetime(value) -> str:
    d = _as_datetime(value)
    return d.strftime("%B %d, %Y %H:%M") if d else "—"


def format_weight(lbs) -> str:
    return f"{pricing.to_decimal(lbs, limit=DISPLAY_LIMIT).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)} lbs"


def customer_label(customer: Customer) -> str:
    return f"{customer.custom_address} - {customer.full_name}"


def should_search_code(term: str) -> bool:
    return len(term.strip()) >= MIN_CODE_SEARCH_LENGTH


def warehouse_sender_fields(customer: Customer) -> dict[str, str]:
    """Sender block pre-filled when a customer is picked for a new parcel."""
    return {
        "sender_name": customer.custom_address,
        "sender_address": WAREHOUSE_ADDRESS,
        "sender_city": WAREHOUSE_CITY,
        "sender_state": WAREHOUSE_STATE,
        "sender_zip_code": WAREHOUSE_ZIP,
    }


# ---------- Validation ----------

def _is_number(value) -> bool:
    """Whole string is a finite number the estimator will price."""
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return False
    return number.is_finite() and number.copy_abs() <= pricing.MAX_INPUT


def validate_customer_inputs(first_name: str, last_name: str, email: str, phone: str,
                             haiti_address: str, haiti_city: str) -> list[str]:
    errors: list[str] = []
    if not first_name.strip():
        errors.append("First name is required.")
    if not last_name.strip():
        errors.append("Last name is required.")
    if "@" not in email:
        errors.append("A valid email is required.")
    if not phone.strip():
        errors.append("Phone is required.")
    if not haiti_address.strip() or not haiti_city.strip():
        errors.append("Haiti address and city are required.")
    return errors


def validate_parcel_inputs(customer_id: str | None, sender: dict[str, str], description: str,
                           weight, declared_value) -> list[str]:
    errors: list[str] = []
    if not customer_id:
        errors.append("Select a customer.")
    if any(not str(v).strip() for v in sender.values()):
        errors.append("All sender fields are required.")
    if not description.strip():
        errors.append("Description is required.")
    for label, value in (("Weight", weight), ("Declared value", declared_value)):
        if not _is_number(value):
            errors.append(f"{label} must be numeric.")
        elif Decimal(str(value).strip()) < 0:
            errors.append(f"{label} cannot be negative.")
    return errors


def validate_payment_inputs(parcel: Parcel | None, amount) -> list[str]:
    errors: list[str] = []
    if parcel is None:
        errors.append("Look up a parcel first.")
    if not _is_number(amount):
        errors.append("Amount must be numeric.")
    elif Decimal(str(amount).strip()) <= 0:
        errors.append("Amount must be > 0.")
    return errors


# ---------- Aggregates ----------

def customer_parcel_stats(parcels: list[Parcel]) -> dict:
    return {
        "total_parcels": len(parcels),
        "total_billed": sum((p.total_amount for p in parcels), Decimal("0")),
        "in_transit": sum(1 for p in parcels if pricing.is_in_transit(p.status)),
        "delivered": sum(1 for p in parcels if pricing.is_delivered(p.status)),
    }


def average_transaction(revenue: RevenueReport) -> Decimal:
    if not revenue.transaction_count:
        return Decimal("0")
    return revenue.total_revenue / revenue.transaction_count


# ---------- Exports ----------

def parcels_to_frame(parcels: list[Parcel]) -> pd.DataFrame:
    rows = [
        {
            "tracking_number": p.tracking_number,
            "customer": customer_label(p.customer) if p.customer else "",
            "status": p.status,
            "category": pricing.classify_parcel_status(p.status).value,
            "weight": float(p.weight),
            "total_amount": float(p.total_amount),
            "payment_status": p.payment_status,
            "created_at": format_date(p.created_at),
        }
        for p in parcels
    ]
    if not rows:
        return pd.DataFrame(columns=[
            "tracking_number", "customer", "status", "category", "weight",
            "total_amount", "payment_status", "created_at",
        ])
    return pd.DataFrame(rows)


def payments_to_frame(payments: list[Payment]) -> pd.DataFrame:
    rows = [
        {
            "id": p.id,
            "amount": float(p.amount),
            "method": p.method.value,
            "reference": p.reference or "",
            "created_at": format_datetime(p.created_at),
        }
        for p in payments
    ]
    if not rows:
        return pd.DataFrame(columns=["id", "amount", "method", "reference", "created_at"])
    return pd.DataFrame(rows)


def customers_to_frame(customers: list[Customer]) -> pd.DataFrame:
    rows = [
        {
            "custom_address": c.custom_address,
            "name": c.full_name,
            "email": c.email or "",
            "phone": c.phone or "",
            "created_at": format_date(c.created_at),
        }
        for c in customers
    ]
    if not rows:
        return pd.DataFrame(columns=["custom_address", "name", "email", "phone", "created_at"])
    return pd.DataFrame(rows)


def frame_to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")
