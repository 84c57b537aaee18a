"""
Cart State Management
Mirrors the server-side cart.

Every mutation is one round-trip; on success the whole local snapshot is
replaced by the snapshot the server returns, on failure only ``error`` and
``loading`` change. Totals are never computed locally.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from models import CartSnapshot
from state.observable import Observable
from utils.errors import ApiError, MarketplaceError, ValidationError

logger = logging.getLogger(__name__)


class CartStore(Observable):
    """Local cache of the customer's cart"""

    def __init__(self, client):
        super().__init__()
        self._client = client
        # One mutation in flight per cart; overlapping clicks queue up here
        self._lock = threading.RLock()
        self.snapshot = CartSnapshot.empty()
        self.loading = False
        self.error: Optional[str] = None
        self.last_synced: Optional[datetime] = None

    # =========================================================================
    # Property Accessors
    # =========================================================================

    @property
    def items(self):
        return self.snapshot.items

    @property
    def total_items(self) -> int:
        return self.snapshot.total_items

    @property
    def total_amount(self):
        return self.snapshot.total_amount

    def quantity_of(self, fabric_id: str) -> int:
        item = self.snapshot.find(fabric_id)
        return item.quantity if item else 0

    # =========================================================================
    # Operations
    # =========================================================================

    def fetch(self) -> Optional[CartSnapshot]:
        return self._sync("fetch cart", self._client.get_cart)

    def add_item(self, fabric_id: str, quantity: int = 1) -> Optional[CartSnapshot]:
        def call():
            if quantity is None or int(quantity) < 1:
                raise ValidationError("Quantity must be at least 1")
            return self._client.add_to_cart(fabric_id, int(quantity))

        return self._sync("add to cart", call)

    def set_quantity(self, fabric_id: str, quantity: int) -> Optional[CartSnapshot]:
        """Quantities of zero or less remove the item"""
        if quantity is None or int(quantity) <= 0:
            return self.remove_item(fabric_id)
        return self._sync(
            "update quantity",
            lambda: self._client.update_cart_item(fabric_id, int(quantity)),
        )

    def remove_item(self, fabric_id: str) -> Optional[CartSnapshot]:
        return self._sync(
            "remove from cart",
            lambda: self._client.remove_from_cart(fabric_id),
            missing_is_empty=True,
        )

    def clear(self) -> Optional[CartSnapshot]:
        return self._sync("clear cart", self._client.clear_cart, missing_is_empty=True)

    def reset(self) -> None:
        """Drop the local copy without touching the server (logout)"""
        with self._lock:
            self.snapshot = CartSnapshot.empty()
            self.loading = False
            self.error = None
            self.last_synced = None
        self._notify()

    def clear_error(self) -> None:
        self.error = None
        self._notify()

    # =========================================================================
    # Synchronization
    # =========================================================================

    def _sync(
        self,
        action: str,
        call: Callable[[], dict],
        missing_is_empty: bool = False,
    ) -> Optional[CartSnapshot]:
        snapshot = None
        with self._lock:
            self.loading = True
            self.error = None
            self._notify()
            try:
                try:
                    payload = call()
                except ApiError as e:
                    # 404 on remove/clear means the server has no cart at all
                    if not (missing_is_empty and e.status_code == 404):
                        raise
                    payload = None
                snapshot = CartSnapshot.from_dict(payload)
            except MarketplaceError as e:
                logger.info("Could not %s: %s", action, e)
                self.error = str(e) or f"Failed to {action}"
            else:
                self.snapshot = snapshot
                self.last_synced = datetime.now()
            finally:
                self.loading = False
        self._notify()
        return snapshot

    def __repr__(self) -> str:
        return f"CartStore(total_items={self.total_items}, total_amount={self.total_amount})"
