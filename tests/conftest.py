"""
pytest configuration and shared fixtures for SuitCraft frontend tests.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add the frontend directory to path for imports
frontend_dir = Path(__file__).parent.parent / "frontend"
sys.path.insert(0, str(frontend_dir))

from models import Fabric, Tailor  # noqa: E402
from state.tokens import MemoryTokenStore  # noqa: E402
from utils.errors import ApiError  # noqa: E402


class FakeCartBackend:
    """
    In-memory stand-in for the cart endpoints of ``APIClient``.

    Totals are computed here, the way the server does it, so tests can
    check that ``CartStore`` only ever mirrors them.
    """

    def __init__(self, prices=None, stock=None):
        self.prices = {k: Decimal(str(v)) for k, v in (prices or {}).items()}
        self.stock = stock or {}
        self.lines = {}
        self.has_cart = True
        self.fail_with = None
        self.calls = []

    def _snapshot(self) -> dict:
        items = [
            {
                "fabric": {"_id": fid, "name": f"Fabric {fid}", "price": str(self.prices[fid])},
                "quantity": qty,
                "price": str(self.prices[fid]),
                "subtotal": str(self.prices[fid] * qty),
            }
            for fid, qty in self.lines.items()
        ]
        return {
            "items": items,
            "totalItems": sum(self.lines.values()),
            "totalAmount": str(sum((self.prices[f] * q for f, q in self.lines.items()), Decimal("0"))),
            "lastUpdated": "2024-05-01T10:00:00.000Z",
        }

    def _check(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail_with is not None:
            raise self.fail_with

    def get_cart(self):
        self._check("get_cart")
        return self._snapshot()

    def add_to_cart(self, fabric_id, quantity):
        self._check("add_to_cart", fabric_id, quantity)
        if fabric_id not in self.prices:
            raise ApiError("Fabric not found", 404)
        new_quantity = self.lines.get(fabric_id, 0) + quantity
        if fabric_id in self.stock and new_quantity > self.stock[fabric_id]:
            raise ApiError("Insufficient stock", 400)
        self.lines[fabric_id] = new_quantity
        self.has_cart = True
        return self._snapshot()

    def update_cart_item(self, fabric_id, quantity):
        self._check("update_cart_item", fabric_id, quantity)
        if fabric_id not in self.lines:
            raise ApiError("Item not found in cart", 404)
        self.lines[fabric_id] = quantity
        return self._snapshot()

    def remove_from_cart(self, fabric_id):
        self._check("remove_from_cart", fabric_id)
        if not self.has_cart:
            raise ApiError("Cart not found", 404)
        self.lines.pop(fabric_id, None)
        return self._snapshot()

    def clear_cart(self):
        self._check("clear_cart")
        if not self.has_cart:
            raise ApiError("Cart not found", 404)
        self.lines.clear()
        return self._snapshot()


@pytest.fixture
def tokens():
    return MemoryTokenStore()


@pytest.fixture
def cart_backend():
    return FakeCartBackend(prices={"F1": 500, "F2": 1500, "F3": 3000}, stock={"F1": 50})


@pytest.fixture
def fabrics():
    return [
        Fabric(id="f1", name="Navy Wool", price=Decimal("500"), stock=20,
               category="Wool", color="Navy Blue", material="Merino Wool", shop_city="Mumbai"),
        Fabric(id="f2", name="Ivory Silk", price=Decimal("1500"), stock=5,
               category="Silk", color="Ivory", material="Mulberry Silk", shop_city="Delhi"),
        Fabric(id="f3", name="Charcoal Linen", price=Decimal("3000"), stock=0,
               category="Linen", color="Charcoal Grey", material="Irish Linen", shop_city="Mumbai"),
    ]


@pytest.fixture
def tailors():
    return [
        Tailor(id="t1", name="Arjun Tailors", city="Mumbai", specialization=["Suits", "Sherwani"],
               experience=12, rating=4.8),
        Tailor(id="t2", name="Bespoke Bros", city="Delhi", specialization=["Wedding Suits"],
               experience=6, rating=4.2),
        Tailor(id="t3", name="Corner Stitch", city="Pune", specialization=["Alterations"],
               experience=2, rating=3.9),
    ]
