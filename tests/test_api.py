"""
HTTP client tests. The requests session is a MagicMock; no network.
"""

from decimal import Decimal

import pytest
import requests

from api import ApiError, DEFAULT_ERROR_MESSAGE, UNEXPECTED_RESPONSE_MESSAGE
from models import CustomerCreate, ParcelCreate, PaymentCreate, PaymentMethod, StatusUpdate


def sent(http):
    """(method, url, kwargs) of the last request."""
    args, kwargs = http.request.call_args
    return args[0], args[1], kwargs


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST PIPELINE
# ═══════════════════════════════════════════════════════════════════════════════

class TestRequest:

    def test_no_token_no_auth_header(self, client, http, make_response):
        http.request.return_value = make_response(body=[])
        client.get_invoices()
        _, url, kwargs = sent(http)
        assert url == "http://api.test/invoices"
        assert "Authorization" not in kwargs["headers"]
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["timeout"] == 5

    def test_bearer_token_attached(self, client, http, make_response):
        client.session.token = "tok-123"
        http.request.return_value = make_response(body=[])
        client.get_invoices()
        _, _, kwargs = sent(http)
        assert kwargs["headers"]["Authorization"] == "Bearer tok-123"

    def test_empty_params_dropped(self, client, http, make_response):
        http.request.return_value = make_response(body=[])
        client.get_parcels(status="PENDING", customer_id=None, search="")
        _, _, kwargs = sent(http)
        assert kwargs["params"] == {"status": "PENDING"}

    def test_all_params_empty_sends_none(self, client, http, make_response):
        http.request.return_value = make_response(body=[])
        client.get_customers(search="")
        _, _, kwargs = sent(http)
        assert kwargs["params"] is None

    def test_error_message_from_body(self, client, http, make_response):
        http.request.return_value = make_response(404, {"message": "Parcel not found"})
        with pytest.raises(ApiError) as exc:
            client.get_parcel("missing")
        assert exc.value.message == "Parcel not found"
        assert exc.value.status_code == 404
        assert exc.value.is_not_found

    def test_error_message_list_joined(self, client, http, make_response):
        http.request.return_value = make_response(400, {"message": ["email must be an email", "phone is required"]})
        with pytest.raises(ApiError) as exc:
            client.create_customer(CustomerCreate(
                first_name="A", last_name="B", email="x", phone="", haiti_address="a", haiti_city="b",
            ))
        assert exc.value.message == "email must be an email; phone is required"

    def test_error_message_of_unexpected_type(self, client, http, make_response):
        http.request.return_value = make_response(409, {"message": {"code": "DUPLICATE"}})
        with pytest.raises(ApiError) as exc:
            client.get_invoices()
        assert exc.value.message == DEFAULT_ERROR_MESSAGE
        assert exc.value.status_code == 409

    def test_error_without_json_body(self, client, http, make_response):
        http.request.return_value = make_response(500, content=b"<html>oops</html>")
        with pytest.raises(ApiError) as exc:
            client.get_invoices()
        assert exc.value.message == DEFAULT_ERROR_MESSAGE
        assert exc.value.status_code == 500

    def test_unauthorized(self, client, http, make_response):
        http.request.return_value = make_response(401, {"message": "Unauthorized"})
        with pytest.raises(ApiError) as exc:
            client.get_dashboard_stats()
        assert exc.value.is_unauthorized

    def test_network_failure(self, client, http):
        http.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ApiError) as exc:
            client.get_invoices()
        assert exc.value.message == DEFAULT_ERROR_MESSAGE
        assert exc.value.status_code is None

    def test_non_json_success_body(self, client, http, make_response):
        http.request.return_value = make_response(200, content=b"not json")
        with pytest.raises(ApiError) as exc:
            client.get_invoices()
        assert exc.value.message == UNEXPECTED_RESPONSE_MESSAGE

    def test_response_shape_mismatch(self, client, http, make_response):
        http.request.return_value = make_response(body={"unexpected": True})
        with pytest.raises(ApiError) as exc:
            client.get_parcel("p1")
        assert exc.value.message == UNEXPECTED_RESPONSE_MESSAGE

    def test_empty_body_returns_none(self, client, http, make_response):
        http.request.return_value = make_response(204)
        assert client.request("POST", "/anything") is None


# ═══════════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestEndpoints:

    def test_login(self, client, http, make_response, user_json):
        http.request.return_value = make_response(201, {"access_token": "jwt", "user": user_json})
        result = client.login("admin@yeng.ht", "secret")
        method, url, kwargs = sent(http)
        assert (method, url) == ("POST", "http://api.test/auth/login")
        assert kwargs["json"] == {"email": "admin@yeng.ht", "password": "secret"}
        assert result.access_token == "jwt"
        assert result.user.full_name == "Marie Pierre"

    def test_get_parcel(self, client, http, make_response, parcel_json):
        http.request.return_value = make_response(body=parcel_json)
        parcel = client.get_parcel("p1")
        assert sent(http)[1] == "http://api.test/parcels/p1"
        assert parcel.tracking_number == "YNG-12345678"
        assert parcel.total_amount == Decimal("37.4")
        assert parcel.customer.custom_address == "YENGSHIPPING-4582"
        assert parcel.payments[0].method == PaymentMethod.CASH

    def test_tracking_lookup_strips_and_quotes(self, client, http, make_response, parcel_json):
        http.request.return_value = make_response(body=parcel_json)
        client.get_parcel_by_tracking("  YNG 1/2 ")
        assert sent(http)[1] == "http://api.test/parcels/tracking/YNG%201%2F2"

    def test_customer_code_search(self, client, http, make_response, customer_json):
        http.request.return_value = make_response(body=[customer_json])
        customers = client.search_customers_by_code("4582")
        _, url, kwargs = sent(http)
        assert url == "http://api.test/customers/search/by-code"
        assert kwargs["params"] == {"code": "4582"}
        assert customers[0].full_usa_address.startswith("YENGSHIPPING-4582")

    def test_parcels_for_customer(self, client, http, make_response):
        http.request.return_value = make_response(body=[])
        client.get_parcels(customer_id="c1")
        assert sent(http)[2]["params"] == {"customerId": "c1"}

    def test_create_parcel_auto_pricing_omits_fees(self, client, http, make_response, parcel_json):
        http.request.return_value = make_response(201, parcel_json)
        client.create_parcel(ParcelCreate(
            customer_id="c1",
            sender_name="YENGSHIPPING-4582",
            sender_address="7829 NW 72nd Ave",
            sender_city="Miami",
            sender_state="FL",
            sender_zip_code="33166",
            description="Clothes",
            weight=10,
            declared_value=200,
        ))
        payload = sent(http)[2]["json"]
        assert payload["customerId"] == "c1"
        assert payload["senderZipCode"] == "33166"
        assert payload["declaredValue"] == 200
        assert "shippingFee" not in payload
        assert "discount" not in payload
        assert "taxAmount" not in payload

    def test_create_parcel_manual_pricing(self, client, http, make_response, parcel_json):
        http.request.return_value = make_response(201, parcel_json)
        client.create_parcel(ParcelCreate(
            customer_id="c1", sender_name="n", sender_address="a", sender_city="c",
            sender_state="s", sender_zip_code="z", description="d", weight=1, declared_value=0,
            shipping_fee=50, discount=10, tax_amount=5,
        ))
        payload = sent(http)[2]["json"]
        assert (payload["shippingFee"], payload["discount"], payload["taxAmount"]) == (50, 10, 5)

    def test_update_status(self, client, http, make_response, parcel_json):
        http.request.return_value = make_response(body=parcel_json)
        client.update_parcel_status("p1", StatusUpdate(status="ARRIVED_HAITI", location="Port-au-Prince"))
        method, url, kwargs = sent(http)
        assert (method, url) == ("PATCH", "http://api.test/parcels/p1/status")
        assert kwargs["json"] == {"status": "ARRIVED_HAITI", "location": "Port-au-Prince"}

    def test_payments(self, client, http, make_response):
        http.request.return_value = make_response(201, {"id": "pay9", "amount": "12.5", "method": "MONCASH"})
        payment = client.create_payment(PaymentCreate(
            parcel_id="p1", amount=12.5, method=PaymentMethod.MONCASH, received_by="u1",
        ))
        assert sent(http)[2]["json"] == {
            "parcelId": "p1", "amount": 12.5, "method": "MONCASH", "receivedBy": "u1",
        }
        assert payment.amount == Decimal("12.5")

        http.request.return_value = make_response(body=[])
        client.get_payments(parcel_id="p1")
        assert sent(http)[2]["params"] == {"parcelId": "p1"}

    def test_invoice_pdf_is_raw(self, client, http, make_response):
        http.request.return_value = make_response(content=b"%PDF-1.4")
        assert client.download_invoice_pdf("i1") == b"%PDF-1.4"
        assert sent(http)[1] == "http://api.test/invoices/i1/pdf"

    def test_receipt_is_raw(self, client, http, make_response):
        http.request.return_value = make_response(content=b"%PDF-1.4")
        assert client.download_payment_receipt("pay1") == b"%PDF-1.4"
        assert sent(http)[1] == "http://api.test/payments/pay1/receipt"

    def test_send_invoice_email(self, client, http, make_response):
        http.request.return_value = make_response(201)
        assert client.send_invoice_email("i1") == {}
        method, url, _ = sent(http)
        assert (method, url) == ("POST", "http://api.test/invoices/i1/send-email")

    def test_dashboard_stats(self, client, http, make_response):
        http.request.return_value = make_response(body={
            "totalShipments": {"value": 120, "growth": 12.5},
            "revenue": {"value": 4520.75, "growth": -3},
            "activeDeliveries": {"value": 8, "readyForPickup": 3},
            "pendingTasks": {"value": 5, "urgentIssues": 1},
        })
        stats = client.get_dashboard_stats()
        assert stats.revenue.value == Decimal("4520.75")
        assert stats.active_deliveries.ready_for_pickup == 3
        assert stats.pending_tasks.urgent_issues == 1

    def test_reports(self, client, http, make_response):
        http.request.return_value = make_response(body={
            "totalRevenue": 300, "transactionCount": 4,
            "byMethod": [{"method": "CASH", "total": 200}, {"method": "CARD", "total": 100}],
        })
        revenue = client.get_revenue()
        assert revenue.by_method[1].method == "CARD"

        http.request.return_value = make_response(body=[{"month": "Jan", "count": 4}])
        client.get_customer_growth()
        _, url, kwargs = sent(http)
        assert url == "http://api.test/reports/customer-growth"
        assert kwargs["params"] == {"months": 6}

        http.request.return_value = make_response(body=[{"day": "Mon", "count": 2, "date": "2024-03-04"}])
        volume = client.get_shipping_volume()
        assert volume[0].count == 2
        assert sent(http)[2]["params"] == {"days": 7}
