"""
models.py
Typed views of the backend's JSON (camelCase on the wire, snake_case here).

Read models are validated when a response arrives; request payloads are
serialized by alias with unset optional fields left out.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

PARCEL_STATUSES = [
    "PENDING",
    "IN_TRANSIT_USA",
    "DEPARTED_USA",
    "ARRIVED_MIAMI",
    "IN_TRANSIT_HAITI",
    "ARRIVED_HAITI",
    "READY_FOR_PICKUP",
    "PICKED_UP",
    "DELIVERED",
    "CANCELLED",
]

PAYMENT_STATUSES = ["PENDING", "PARTIAL", "PAID", "REFUNDED"]

# Backend sends null for some text columns; read it as an empty string
Text = Annotated[str, BeforeValidator(lambda v: "" if v is None else v)]


class PaymentMethod(str, Enum):
    CASH = "CASH"
    MONCASH = "MONCASH"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"


PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.MONCASH: "MonCash",
    PaymentMethod.CARD: "Card",
    PaymentMethod.BANK_TRANSFER: "Bank transfer",
}


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )


# ---------- Entities ----------

class User(ApiModel):
    id: str
    email: str
    first_name: Text = ""
    last_name: Text = ""
    role: Text = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Customer(ApiModel):
    id: str
    first_name: Text = ""
    last_name: Text = ""
    email: str | None = None
    phone: str | None = None
    custom_address: Text = ""
    full_usa_address: str | None = Field(default=None, alias="fullUSAAddress")
    haiti_address: str | None = None
    haiti_city: str | None = None
    haiti_country: str | None = None
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class TrackingEvent(ApiModel):
    id: str | None = None
    status: str | None = None
    location: str | None = None
    description: str | None = None
    timestamp: datetime | None = None


class Payment(ApiModel):
    id: str
    parcel_id: str | None = None
    amount: Decimal = Field(gt=0)
    method: PaymentMethod
    reference: str | None = None
    notes: str | None = None
    received_by: str | None = None
    created_at: datetime | None = None


class Parcel(ApiModel):
    id: str
    tracking_number: str
    barcode: str | None = None
    # Kept as a plain string so unknown tokens still load; see pricing.classify_parcel_status
    status: Text = "PENDING"
    current_location: str | None = None
    description: str | None = None
    weight: Decimal = Decimal("0")
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    declared_value: Decimal = Decimal("0")
    shipping_fee: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    # Persisted by the backend at creation; never recomputed here
    total_amount: Decimal = Decimal("0")
    payment_status: Text = "PENDING"
    sender_name: str | None = None
    sender_address: str | None = None
    sender_city: str | None = None
    sender_state: str | None = None
    sender_zip_code: str | None = None
    notes: str | None = None
    customer_id: str | None = None
    customer: Customer | None = None
    payments: list[Payment] = Field(default_factory=list)
    tracking_events: list[TrackingEvent] = Field(default_factory=list)
    created_at: datetime | None = None
    estimated_arrival: datetime | None = None


class Invoice(ApiModel):
    id: str
    invoice_number: str
    created_at: datetime | None = None
    parcel: Parcel | None = None


class LoginResult(BaseModel):
    access_token: str
    user: User


# ---------- Reports ----------

class GrowthMetric(ApiModel):
    value: Decimal = Decimal("0")
    growth: float = 0.0


class DeliveryMetric(ApiModel):
    value: int = 0
    ready_for_pickup: int = 0


class TaskMetric(ApiModel):
    value: int = 0
    urgent_issues: int = 0


class DashboardStats(ApiModel):
    total_shipments: GrowthMetric = Field(default_factory=GrowthMetric)
    revenue: GrowthMetric = Field(default_factory=GrowthMetric)
    active_deliveries: DeliveryMetric = Field(default_factory=DeliveryMetric)
    pending_tasks: TaskMetric = Field(default_factory=TaskMetric)


class StatusCount(ApiModel):
    status: str
    count: int = 0


class MethodRevenue(ApiModel):
    method: str
    total: Decimal = Decimal("0")


class RevenueReport(ApiModel):
    total_revenue: Decimal = Decimal("0")
    transaction_count: int = 0
    by_method: list[MethodRevenue] = Field(default_factory=list)


class GrowthPoint(ApiModel):
    month: str
    count: int = 0


class VolumePoint(ApiModel):
    day: str
    count: int = 0
    date: str | None = None


# ---------- Request payloads ----------

class CustomerCreate(ApiModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    haiti_address: str
    haiti_city: str
    haiti_country: str = "Haiti"


class ParcelCreate(ApiModel):
    customer_id: str
    sender_name: str
    sender_address: str
    sender_city: str
    sender_state: str
    sender_zip_code: str
    description: str
    weight: float = Field(ge=0)
    declared_value: float = Field(ge=0)
    barcode: str | None = None
    length: float | None = None
    width: float | None = None
    height: float | None = None
    notes: str | None = None
    # Manual pricing only; the backend prices the parcel when these are absent
    shipping_fee: float | None = None
    discount: float | None = None
    tax_amount: float | None = None


class StatusUpdate(ApiModel):
    status: str
    location: str | None = None
    description: str | None = None


class PaymentCreate(ApiModel):
    parcel_id: str
    amount: float = Field(gt=0)
    method: PaymentMethod
    received_by: str
    reference: str | None = None
    notes: str | None = None


def to_payload(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
