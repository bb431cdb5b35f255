import json

import pytest
import requests
from unittest.mock import MagicMock

import db
from api import ApiClient
from auth import Session


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def storage(tmp_path, monkeypatch):
    """Client storage backed by a throwaway SQLite file."""
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "storage.db")
    db.init_db()
    return tmp_path / "storage.db"


@pytest.fixture
def make_response():
    def _make(status=200, body=None, content: bytes | None = None):
        resp = requests.Response()
        resp.status_code = status
        if content is not None:
            resp._content = content
        elif body is not None:
            resp._content = json.dumps(body).encode("utf-8")
        else:
            resp._content = b""
        resp.encoding = "utf-8"
        return resp
    return _make


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def client(http, storage):
    return ApiClient(Session(), base_url="http://api.test", timeout=5, http=http)


@pytest.fixture
def user_json():
    return {
        "id": "u1",
        "email": "admin@yeng.ht",
        "firstName": "Marie",
        "lastName": "Pierre",
        "role": "ADMIN",
    }


@pytest.fixture
def customer_json():
    return {
        "id": "c1",
        "firstName": "Jean",
        "lastName": "Baptiste",
        "email": "jean@example.com",
        "phone": "+509 3700 0000",
        "customAddress": "YENGSHIPPING-4582",
        "fullUSAAddress": "YENGSHIPPING-4582, 7829 NW 72nd Ave, Miami, FL 33166",
        "haitiAddress": "12 Rue Capois",
        "haitiCity": "Port-au-Prince",
        "haitiCountry": "Haiti",
        "createdAt": "2024-03-01T10:00:00.000Z",
    }


@pytest.fixture
def parcel_json(customer_json):
    return {
        "id": "p1",
        "trackingNumber": "YNG-12345678",
        "barcode": "0123456789",
        "status": "IN_TRANSIT_USA",
        "description": "Clothes",
        "weight": 10,
        "declaredValue": 200,
        "shippingFee": 34,
        "discount": 0,
        "taxAmount": 3.4,
        "totalAmount": 37.4,
        "paymentStatus": "PARTIAL",
        "senderName": "YENGSHIPPING-4582",
        "senderAddress": "7829 NW 72nd Ave",
        "senderCity": "Miami",
        "senderState": "FL",
        "senderZipCode": "33166",
        "customerId": "c1",
        "customer": customer_json,
        "payments": [
            {"id": "pay1", "amount": 20, "method": "CASH", "createdAt": "2024-03-02T09:00:00Z"},
        ],
        "trackingEvents": [
            {"id": "e1", "status": "PENDING", "location": "Miami", "description": "Received",
             "timestamp": "2024-03-01T10:00:00Z"},
        ],
        "createdAt": "2024-03-01T10:00:00Z",
    }
