"""
Tests for APIClient: envelope handling, bearer token and error normalization.

``requests.Session.request`` is patched so no network is involved.
"""

import json
from unittest.mock import patch

import pytest
import requests

from utils.api_client import APIClient, fetch_all_pages, normalize_error_message
from utils.errors import ApiError

BASE = "http://api.test/api/v1"


def make_response(status: int, body) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode() if body is not None else b""
    resp.headers["Content-Type"] = "application/json"
    return resp


@pytest.fixture
def client():
    return APIClient(BASE, token_provider=lambda: "tok123")


class TestTransport:

    def test_unwraps_data_and_sends_bearer(self, client):
        body = {"success": True, "data": {"items": [], "totalItems": 0, "totalAmount": 0}}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)) as req:
            result = client.get_cart()

        assert result == body["data"]
        method, url = req.call_args.args
        assert (method, url) == ("GET", f"{BASE}/cart")
        assert req.call_args.kwargs["headers"] == {"Authorization": "Bearer tok123"}

    def test_no_token_no_header(self):
        client = APIClient(BASE, token_provider=lambda: None)
        with patch.object(requests.Session, "request", return_value=make_response(200, {"data": []})) as req:
            client.get_fabrics()

        assert req.call_args.kwargs["headers"] == {}

    def test_add_to_cart_body(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(200, {"data": {}})) as req:
            client.add_to_cart("F1", 2)

        assert req.call_args.args == ("POST", f"{BASE}/cart/add")
        assert req.call_args.kwargs["json"] == {"fabricId": "F1", "quantity": 2}

    def test_upload_is_multipart(self, client):
        image = ("a.png", b"\x89PNG", "image/png")
        body = {"success": True, "data": {"url": "https://cdn/a.png"}}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)) as req:
            result = client.upload_image(image)

        assert result["url"] == "https://cdn/a.png"
        assert req.call_args.kwargs["files"] == {"image": image}
        assert req.call_args.kwargs["json"] is None
        assert req.call_args.kwargs["timeout"] == client.upload_timeout

    def test_search_returns_whole_payload(self, client):
        body = {"success": True, "query": "silk", "results": {"fabrics": {"count": 0, "data": []}}}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)):
            result = client.search("silk", "fabrics")

        assert result["results"]["fabrics"]["count"] == 0

    def test_get_order_by_id(self, client):
        body = {"success": True, "data": {"_id": "o1", "status": "shipped", "trackingNumber": "TRK9"}}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)) as req:
            result = client.get_order("o1")

        assert req.call_args.args == ("GET", f"{BASE}/orders/o1")
        assert result["trackingNumber"] == "TRK9"

    def test_upload_images_sends_one_part_per_file(self, client):
        first = ("a.png", b"\x89PNG", "image/png")
        second = ("b.jpg", b"\xff\xd8", "image/jpeg")
        body = {"success": True, "data": [
            {"url": "https://cdn/a.png", "publicId": "a"},
            {"url": "https://cdn/b.jpg", "publicId": "b"},
        ]}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)) as req:
            result = client.upload_images([first, second])

        assert req.call_args.args == ("POST", f"{BASE}/upload/multiple")
        assert req.call_args.kwargs["files"] == [("images", first), ("images", second)]
        assert req.call_args.kwargs["timeout"] == client.upload_timeout
        assert [r["url"] for r in result] == ["https://cdn/a.png", "https://cdn/b.jpg"]

    def test_update_shop_body(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(200, {"data": {}})) as req:
            client.update_shop("s1", {"name": "Loom House"})

        assert req.call_args.args == ("PUT", f"{BASE}/shops/s1")
        assert req.call_args.kwargs["json"] == {"name": "Loom House"}

    def test_update_profile_body(self, client):
        prefs = {"preferences": {"fabricTypes": ["Silk"]}}
        with patch.object(requests.Session, "request", return_value=make_response(200, {"data": {}})) as req:
            client.update_profile(prefs)

        assert req.call_args.args == ("PUT", f"{BASE}/customers/profile")
        assert req.call_args.kwargs["json"] == prefs

    def test_suggestions_read_from_suggestions_key(self, client):
        body = {"success": True, "suggestions": [{"type": "fabric", "text": "Silk Saree"}]}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)) as req:
            result = client.get_search_suggestions("sil")

        assert req.call_args.kwargs["params"] == {"q": "sil"}
        assert result == [{"type": "fabric", "text": "Silk Saree"}]


class TestErrors:

    def test_invalid_credentials_rephrased(self, client):
        body = {"success": False, "message": "Invalid credentials"}
        with patch.object(requests.Session, "request", return_value=make_response(401, body)):
            with pytest.raises(ApiError) as exc:
                client.login("a@b.c", "bad", "customer")

        assert str(exc.value) == "Wrong password or email. Please try again."
        assert exc.value.status_code == 401

    def test_registration_500_rephrased(self, client):
        body = {"success": False, "message": "Server error during registration"}
        with patch.object(requests.Session, "request", return_value=make_response(500, body)):
            with pytest.raises(ApiError) as exc:
                client.register({"email": "a@b.c"})

        assert str(exc.value) == "User already exists with this email or Role"

    def test_validation_details(self, client):
        body = {"success": False, "message": "Validation failed", "errors": [{"msg": "Quantity must be positive"}]}
        with patch.object(requests.Session, "request", return_value=make_response(400, body)):
            with pytest.raises(ApiError) as exc:
                client.update_cart_item("F1", -1)

        assert str(exc.value) == "Validation failed: Quantity must be positive"

    def test_empty_error_body(self, client):
        with patch.object(requests.Session, "request", return_value=make_response(502, None)):
            with pytest.raises(ApiError) as exc:
                client.get_orders()

        assert str(exc.value) == "An error occurred"
        assert exc.value.status_code == 502

    def test_success_false_with_200(self, client):
        body = {"success": False, "message": "Cart not found"}
        with patch.object(requests.Session, "request", return_value=make_response(200, body)):
            with pytest.raises(ApiError, match="Cart not found"):
                client.clear_cart()

    def test_connection_error(self, client):
        with patch.object(requests.Session, "request", side_effect=requests.exceptions.ConnectionError()):
            with pytest.raises(ApiError) as exc:
                client.get_cart()

        assert str(exc.value) == "Backend not connected"
        assert exc.value.is_transport_error
        assert client.is_connected() is False

    def test_timeout(self, client):
        with patch.object(requests.Session, "request", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(ApiError, match="Request timed out"):
                client.get_cart()


class TestNormalizeErrorMessage:

    def test_other_messages_pass_through(self):
        assert normalize_error_message(404, "Fabric not found") == "Fabric not found"
        assert normalize_error_message(401, "Not authorized") == "Not authorized"

    def test_default(self):
        assert normalize_error_message(500, None) == "An error occurred"


class TestFetchAllPages:
    """List endpoints paginate server side; the client walks every page."""

    @staticmethod
    def paged(records, page_size):
        def fetch(params):
            start = (params["page"] - 1) * page_size
            return records[start:start + page_size]
        return fetch

    def test_walks_until_short_page(self):
        records = [{"_id": str(i)} for i in range(23)]
        assert fetch_all_pages(self.paged(records, 10)) == records

    def test_exact_multiple_stops_on_empty_page(self):
        records = [{"_id": str(i)} for i in range(20)]
        calls = []

        def fetch(params):
            calls.append(params["page"])
            return self.paged(records, 10)(params)

        assert fetch_all_pages(fetch) == records
        assert calls == [1, 2, 3]

    def test_server_ignoring_page_stops_on_repeat(self):
        batch = [{"_id": "a"}, {"_id": "b"}]
        assert fetch_all_pages(lambda params: list(batch)) == batch

    def test_params_forwarded(self):
        seen = []
        fetch_all_pages(lambda params: seen.append(params) or [], {"city": "Pune"})
        assert seen == [{"city": "Pune", "page": 1, "limit": 50}]

    def test_max_pages_caps_the_walk(self):
        assert len(fetch_all_pages(lambda params: [{"_id": params["page"]}], max_pages=3)) == 3

    def test_error_propagates(self):
        def fetch(params):
            if params["page"] == 2:
                raise ApiError("Backend not connected")
            return [{"_id": str(i)} for i in range(10)]

        with pytest.raises(ApiError):
            fetch_all_pages(fetch)
