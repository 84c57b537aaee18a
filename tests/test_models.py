"""
Tests for payload parsing, checkout math, formatters and chart frames.
"""

from decimal import Decimal

import pytest

from components.charts import ChartBuilder
from models import (
    Address,
    CartSnapshot,
    CheckoutSummary,
    Order,
    OrderStatus,
    PaymentMethod,
    Role,
    ShippingMethod,
    User,
)
from utils.errors import ValidationError
from utils.formatters import format_distance, format_price
from views.cart import build_order_payload

CART_PAYLOAD = {
    "items": [
        {"fabric": {"_id": "F1", "name": "Navy Wool", "shop": {"name": "Loom House"}},
         "quantity": 2, "price": 500, "subtotal": 1000},
        {"fabricId": "F2", "quantity": 1, "price": 1499.5, "subtotal": 1499.5},
    ],
    "totalItems": 3,
    "totalAmount": 2499.5,
    "lastUpdated": "2024-05-01T10:00:00.000Z",
}

ADDRESS = Address(name="Asha", address="12 MG Road", city="Pune", state="MH", zip_code="411001", phone="98200")


class TestCartSnapshot:

    def test_from_payload(self):
        snapshot = CartSnapshot.from_dict(CART_PAYLOAD)

        assert snapshot.total_items == 3
        assert snapshot.total_amount == Decimal("2499.5")
        assert snapshot.items[0].fabric_id == "F1"
        assert snapshot.items[0].shop_name == "Loom House"
        assert snapshot.items[1].fabric_id == "F2"
        assert snapshot.last_updated.year == 2024

    def test_null_payload_is_empty(self):
        assert CartSnapshot.from_dict(None) == CartSnapshot.empty()


class TestCheckoutSummary:

    def test_shipping_and_rounded_tax(self):
        snapshot = CartSnapshot.from_dict(CART_PAYLOAD)
        summary = CheckoutSummary.from_cart(snapshot, Decimal("100"), Decimal("0.18"))

        assert summary.subtotal == Decimal("2499.5")
        assert summary.shipping == Decimal("100")
        assert summary.tax == Decimal("450")  # 449.91 rounds half-up to whole units
        assert summary.total == Decimal("3049.5")

    def test_empty_cart_has_no_shipping(self):
        summary = CheckoutSummary.from_cart(CartSnapshot.empty(), Decimal("100"), Decimal("0.18"))
        assert summary.total == Decimal("0")


class TestOrderPayload:

    def test_builds_body(self):
        body = build_order_payload(
            CartSnapshot.from_dict(CART_PAYLOAD), ADDRESS, PaymentMethod.UPI, ShippingMethod.EXPRESS,
        )
        assert body["items"] == [{"fabricId": "F1", "quantity": 2}, {"fabricId": "F2", "quantity": 1}]
        assert body["shippingAddress"]["zipCode"] == "411001"
        assert body["paymentMethod"] == "UPI"

    def test_missing_address_fields(self):
        address = Address(name="Asha", city="Pune")
        with pytest.raises(ValidationError) as exc:
            build_order_payload(CartSnapshot.from_dict(CART_PAYLOAD), address, PaymentMethod.COD, ShippingMethod.STANDARD)
        assert "zip code" in str(exc.value)

    def test_empty_cart(self):
        with pytest.raises(ValidationError, match="empty"):
            build_order_payload(CartSnapshot.empty(), ADDRESS, PaymentMethod.COD, ShippingMethod.STANDARD)


class TestModels:

    def test_user_role_parsing(self):
        user = User.from_dict({"id": "u1", "name": "Ravi", "role": "TAILOR"})
        assert user.role is Role.TAILOR
        assert user.role.dashboard == "Tailor Dashboard"

    @pytest.mark.parametrize("payload", [{"_id": "u1", "role": "admin"}, {"role": "customer"}])
    def test_user_rejects_bad_payload(self, payload):
        with pytest.raises(ValueError):
            User.from_dict(payload)

    def test_address_round_trip_keys(self):
        address = Address.from_dict({"_id": "a1", "name": "Asha", "pincode": "411001"})
        assert address.zip_code == "411001"
        assert "address" in address.missing_fields()

    def test_order_display_id(self):
        order = Order.from_dict({"_id": "65f0c2aa11bb22cc33dd44ee", "status": "Shipped", "total": 1200})
        assert order.display_id == "33DD44EE"
        assert order.status is OrderStatus.SHIPPED
        assert not order.status.is_cancellable


class TestFormatters:

    @pytest.mark.parametrize("km, expected", [
        (0.35, "350m away"),
        (2.5, "2.5km away"),
        (None, "Distance unavailable"),
    ])
    def test_format_distance(self, km, expected):
        assert format_distance(km) == expected

    def test_format_price(self):
        assert format_price(Decimal("2500")) == "₹2,500"
        assert format_price(Decimal("1499.5"), "Rs ") == "Rs 1,499.50"


class TestCharts:

    def test_status_counts_are_zero_filled(self):
        orders = [
            Order.from_dict({"_id": "o1", "status": "Pending", "total": 100}),
            Order.from_dict({"_id": "o2", "status": "Pending", "total": 200}),
            Order.from_dict({"_id": "o3", "status": "Delivered", "total": 300}),
        ]
        counts = ChartBuilder.status_counts(orders).set_index("status")["count"]

        assert counts["Pending"] == 2
        assert counts["Delivered"] == 1
        assert counts["Refunded"] == 0
        assert len(counts) == len(OrderStatus)

    def test_orders_frame_columns(self):
        df = ChartBuilder.orders_to_frame([])
        assert list(df.columns) == ["order", "date", "status", "items", "total"]
