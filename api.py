"""
api.py
REST client for the shipping backend.

Every call goes through ApiClient.request(), which attaches the bearer token
of the Session it was given and turns any failure into ApiError. Responses
are validated into the models in models.py before they reach a page.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests
from pydantic import TypeAdapter, ValidationError

from config import settings
from models import (
    Customer,
    CustomerCreate,
    DashboardStats,
    GrowthPoint,
    Invoice,
    LoginResult,
    Parcel,
    ParcelCreate,
    Payment,
    PaymentCreate,
    RevenueReport,
    StatusCount,
    StatusUpdate,
    VolumePoint,
    to_payload,
)

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An error occurred"
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server"


class ApiError(Exception):
    def __init__(self, message: str = DEFAULT_ERROR_MESSAGE, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def _segment(value) -> str:
    return quote(str(value), safe="")


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    message = body.get("message") if isinstance(body, dict) else None
    if isinstance(message, list):
        message = "; ".join(str(m) for m in message)
    if not isinstance(message, str):
        return DEFAULT_ERROR_MESSAGE
    return message or DEFAULT_ERROR_MESSAGE


def _parse(annotation, data):
    try:
        return TypeAdapter(annotation).validate_python(data)
    except ValidationError as exc:
        logger.warning("Response did not match %s: %s", annotation, exc)
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE) from exc


class ApiClient:
    def __init__(self, session, base_url: str | None = None, timeout: float | None = None, http=None):
        self.session = session
        self.base_url = (base_url or settings.api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.http = http or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    def request(self, method: str, endpoint: str, *, params: dict | None = None, json=None, raw: bool = False):
        """
        Send one request and return the decoded JSON (or raw bytes).
        Empty query parameters are dropped. Raises ApiError on network
        failure, non-2xx status, or a body that is not JSON.
        """
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}
        logger.debug("%s %s params=%s", method, endpoint, params)

        try:
            resp = self.http.request(
                method,
                f"{self.base_url}{endpoint}",
                params=params or None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            raise ApiError(DEFAULT_ERROR_MESSAGE) from exc

        if not resp.ok:
            message = _error_message(resp)
            logger.warning("%s %s returned %s: %s", method, endpoint, resp.status_code, message)
            raise ApiError(message, status_code=resp.status_code)

        if raw:
            return resp.content
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, endpoint)
            raise ApiError(UNEXPECTED_RESPONSE_MESSAGE, status_code=resp.status_code) from exc

    # ---------- Auth ----------

    def login(self, email: str, password: str) -> LoginResult:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        return _parse(LoginResult, data)

    # ---------- Customers ----------

    def get_customers(self, search: str | None = None) -> list[Customer]:
        return _parse(list[Customer], self.request("GET", "/customers", params={"search": search}))

    def get_customer(self, customer_id) -> Customer:
        return _parse(Customer, self.request("GET", f"/customers/{_segment(customer_id)}"))

    def create_customer(self, data: CustomerCreate) -> Customer:
        return _parse(Customer, self.request("POST", "/customers", json=to_payload(data)))

    def search_customers_by_code(self, code: str) -> list[Customer]:
        data = self.request("GET", "/customers/search/by-code", params={"code": code})
        return _parse(list[Customer], data)

    # ---------- Parcels ----------

    def get_parcels(
        self,
        status: str | None = None,
        customer_id: str | None = None,
        search: str | None = None,
    ) -> list[Parcel]:
        params = {"status": status, "customerId": customer_id, "search": search}
        return _parse(list[Parcel], self.request("GET", "/parcels", params=params))

    def get_parcel(self, parcel_id) -> Parcel:
        return _parse(Parcel, self.request("GET", f"/parcels/{_segment(parcel_id)}"))

    def get_parcel_by_tracking(self, tracking_number: str) -> Parcel:
        data = self.request("GET", f"/parcels/tracking/{_segment(tracking_number.strip())}")
        return _parse(Parcel, data)

    def create_parcel(self, data: ParcelCreate) -> Parcel:
        return _parse(Parcel, self.request("POST", "/parcels", json=to_payload(data)))

    def update_parcel_status(self, parcel_id, update: StatusUpdate) -> Parcel:
        data = self.request("PATCH", f"/parcels/{_segment(parcel_id)}/status", json=to_payload(update))
        return _parse(Parcel, data)

    # ---------- Payments ----------

    def get_payments(self, parcel_id: str | None = None) -> list[Payment]:
        return _parse(list[Payment], self.request("GET", "/payments", params={"parcelId": parcel_id}))

    def create_payment(self, data: PaymentCreate) -> Payment:
        return _parse(Payment, self.request("POST", "/payments", json=to_payload(data)))

    def download_payment_receipt(self, payment_id) -> bytes:
        return self.request("GET", f"/payments/{_segment(payment_id)}/receipt", raw=True)

    # ---------- Invoices ----------

    def get_invoices(self) -> list[Invoice]:
        return _parse(list[Invoice], self.request("GET", "/invoices"))

    def get_invoice(self, invoice_id) -> Invoice:
        return _parse(Invoice, self.request("GET", f"/invoices/{_segment(invoice_id)}"))

    def download_invoice_pdf(self, invoice_id) -> bytes:
        return self.request("GET", f"/invoices/{_segment(invoice_id)}/pdf", raw=True)

    def send_invoice_email(self, invoice_id) -> dict:
        return self.request("POST", f"/invoices/{_segment(invoice_id)}/send-email") or {}

    # ---------- Reports ----------

    def get_dashboard_stats(self) -> DashboardStats:
        return _parse(DashboardStats, self.request("GET", "/reports/dashboard"))

    def get_status_breakdown(self) -> list[StatusCount]:
        return _parse(list[StatusCount], self.request("GET", "/reports/status-breakdown"))

    def get_revenue(self) -> RevenueReport:
        return _parse(RevenueReport, self.request("GET", "/reports/revenue"))

    def get_customer_growth(self, months: int = 6) -> list[GrowthPoint]:
        data = self.request("GET", "/reports/customer-growth", params={"months": months})
        return _parse(list[GrowthPoint], data)

    def get_shipping_volume(self, days: int = 7) -> list[VolumePoint]:
        data = self.request("GET", "/reports/shipping-volume", params={"days": days})
        return _parse(list[VolumePoint], data)
