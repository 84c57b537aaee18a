"""
Typed Marketplace Models
Lightweight dataclasses for the objects the backend hands us.

Backend payloads are Mongo documents (``_id``, camelCase keys, sometimes
populated references). Each model parses its own payload once so that the
rest of the frontend never touches raw dicts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================================
# Helpers
# =============================================================================

def to_decimal(value: Any, default: str = "0") -> Decimal:
    """Parse a JSON number (or numeric string) into a Decimal"""
    if value is None or value == "":
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(default)


def ref_id(value: Any) -> str:
    """Id of a reference that may or may not have been populated"""
    if isinstance(value, dict):
        return str(value.get("_id") or value.get("id") or "")
    return str(value) if value is not None else ""


def parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


# =============================================================================
# Enums
# =============================================================================

class Role(Enum):
    """Closed set of account roles"""
    CUSTOMER = "customer"
    TAILOR = "tailor"
    SHOP = "shop"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None

    @property
    def label(self) -> str:
        labels = {
            "customer": "Customer",
            "tailor": "Tailor",
            "shop": "Shop Owner",
        }
        return labels[self.value]

    @property
    def dashboard(self) -> str:
        """Name of the page a freshly signed-in user lands on"""
        dashboards = {
            "customer": "My Dashboard",
            "tailor": "Tailor Dashboard",
            "shop": "Shop Dashboard",
        }
        return dashboards[self.value]


class SessionStatus(Enum):
    """Client belief about the current session"""
    UNKNOWN = "unknown"
    VERIFYING = "verifying"
    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"


class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"

    @classmethod
    def parse(cls, value: Any) -> "OrderStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.PENDING

    @property
    def color(self) -> str:
        colors = {
            "Pending": "#f59e0b",
            "Confirmed": "#3b82f6",
            "Processing": "#8b5cf6",
            "Shipped": "#06b6d4",
            "Delivered": "#10b981",
            "Cancelled": "#ef4444",
            "Refunded": "#64748b",
        }
        return colors.get(self.value, "#64748b")

    @property
    def is_cancellable(self) -> bool:
        return self in (OrderStatus.PENDING, OrderStatus.CONFIRMED)


class PaymentMethod(Enum):
    COD = "COD"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    UPI = "UPI"
    NET_BANKING = "Net Banking"
    WALLET = "Wallet"


class ShippingMethod(Enum):
    STANDARD = "Standard Delivery"
    EXPRESS = "Express Delivery"
    SAME_DAY = "Same Day Delivery"


class InquiryStatus(Enum):
    NEW = "new"
    REPLIED = "replied"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: Any) -> "InquiryStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.NEW

    @property
    def color(self) -> str:
        colors = {
            "new": "#3b82f6",
            "replied": "#10b981",
            "closed": "#64748b",
        }
        return colors.get(self.value, "#64748b")


# =============================================================================
# Accounts
# =============================================================================

@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role
    city: str = ""
    phone: str = ""
    profile: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        if not isinstance(data, dict) or not (data.get("_id") or data.get("id")):
            raise ValueError("User payload is missing an id")
        return cls(
            id=ref_id(data),
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=Role.parse(data.get("role")),
            city=data.get("city", "") or "",
            phone=data.get("phone", "") or "",
            profile=data.get("profile") or {},
        )


@dataclass
class Address:
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    is_default: bool = False
    id: str = ""

    REQUIRED = ("name", "address", "city", "state", "zip_code", "phone")

    @classmethod
    def from_dict(cls, data: dict) -> "Address":
        return cls(
            id=ref_id(data),
            name=data.get("name", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            zip_code=data.get("zipCode", data.get("pincode", "")),
            phone=data.get("phone", ""),
            is_default=bool(data.get("isDefault", False)),
        )

    def missing_fields(self) -> List[str]:
        return [name for name in self.REQUIRED if not str(getattr(self, name)).strip()]

    def to_dict(self) -> dict:
        return {
            "name": self.name.strip(),
            "address": self.address.strip(),
            "city": self.city.strip(),
            "state": self.state.strip(),
            "zipCode": self.zip_code.strip(),
            "phone": self.phone.strip(),
            "isDefault": self.is_default,
        }

    @property
    def one_line(self) -> str:
        return f"{self.address}, {self.city}, {self.state} {self.zip_code}"


# =============================================================================
# Catalog
# =============================================================================

@dataclass
class Shop:
    id: str
    name: str
    city: str = ""
    description: str = ""
    address: str = ""
    phone: str = ""
    rating: float = 0.0
    total_reviews: int = 0
    image: str = ""
    distance: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Shop":
        address = data.get("address", "")
        if isinstance(address, dict):
            address = ", ".join(str(v) for v in address.values() if v)
        return cls(
            id=ref_id(data),
            name=data.get("name", ""),
            city=data.get("city", ""),
            description=data.get("description", ""),
            address=address,
            phone=data.get("phone", ""),
            rating=float(data.get("rating") or 0),
            total_reviews=int(data.get("totalReviews") or 0),
            image=data.get("image", "") or "",
            distance=data.get("distance"),
        )


@dataclass
class Fabric:
    id: str
    name: str
    price: Decimal
    stock: int = 0
    category: str = ""
    color: str = ""
    material: str = ""
    description: str = ""
    image: str = ""
    rating: float = 0.0
    shop_id: str = ""
    shop_name: str = ""
    shop_city: str = ""
    reviews: List[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Fabric":
        shop = data.get("shop")
        shop = shop if isinstance(shop, dict) else {"_id": shop}
        image = data.get("image", "")
        if isinstance(image, dict):
            image = image.get("url", "")
        return cls(
            id=ref_id(data),
            name=data.get("name", ""),
            price=to_decimal(data.get("price")),
            stock=int(data.get("stock") or 0),
            category=data.get("category", "") or "",
            color=data.get("color", "") or "",
            material=data.get("material", "") or "",
            description=data.get("description", "") or "",
            image=image or "",
            rating=float(data.get("ratings", data.get("rating")) or 0),
            shop_id=ref_id(shop.get("_id") or shop.get("id")),
            shop_name=shop.get("name", "") or "",
            shop_city=shop.get("city", "") or "",
            reviews=list(data.get("reviews") or []),
        )

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


@dataclass
class Tailor:
    id: str
    name: str
    city: str = ""
    bio: str = ""
    specialization: List[str] = field(default_factory=list)
    experience: int = 0
    rating: float = 0.0
    total_reviews: int = 0
    price_range: str = ""
    image: str = ""
    availability: str = "Available"
    completed_projects: int = 0
    reviews: List[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Tailor":
        specialization = data.get("specialization") or []
        if isinstance(specialization, str):
            specialization = [specialization]
        return cls(
            id=ref_id(data),
            name=data.get("name", ""),
            city=data.get("city", "") or "",
            bio=data.get("bio", "") or "",
            specialization=list(specialization),
            experience=int(data.get("experience") or 0),
            rating=float(data.get("rating") or 0),
            total_reviews=int(data.get("totalReviews") or 0),
            price_range=data.get("priceRange", "") or "",
            image=data.get("image", "") or "",
            availability=data.get("availability", "Available") or "Available",
            completed_projects=int(data.get("completedProjects") or 0),
            reviews=list(data.get("reviews") or []),
        )


# =============================================================================
# Cart
# =============================================================================

@dataclass(frozen=True)
class CartItem:
    fabric_id: str
    quantity: int
    price: Decimal
    subtotal: Decimal
    name: str = ""
    image: str = ""
    shop_name: str = ""
    stock: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        fabric = data.get("fabric")
        fabric = fabric if isinstance(fabric, dict) else {}
        shop = fabric.get("shop")
        shop = shop if isinstance(shop, dict) else {}
        return cls(
            fabric_id=ref_id(data.get("fabric")) or ref_id(data.get("fabricId")),
            quantity=int(data.get("quantity") or 0),
            price=to_decimal(data.get("price", fabric.get("price"))),
            subtotal=to_decimal(data.get("subtotal")),
            name=fabric.get("name", "") or "",
            image=fabric.get("image", "") or "",
            shop_name=shop.get("name", "") or "",
            stock=fabric.get("stock"),
        )


@dataclass(frozen=True)
class CartSnapshot:
    """
    Complete server-side cart as last returned by the backend.

    Totals are taken verbatim from the server; the client never recomputes
    them.
    """
    items: Tuple[CartItem, ...] = ()
    total_items: int = 0
    total_amount: Decimal = Decimal("0")
    last_updated: Optional[datetime] = None

    @classmethod
    def empty(cls) -> "CartSnapshot":
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CartSnapshot":
        if not data:
            return cls.empty()
        return cls(
            items=tuple(CartItem.from_dict(item) for item in data.get("items") or []),
            total_items=int(data.get("totalItems") or 0),
            total_amount=to_decimal(data.get("totalAmount")),
            last_updated=parse_datetime(data.get("lastUpdated")),
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, fabric_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.fabric_id == fabric_id:
                return item
        return None


@dataclass(frozen=True)
class CheckoutSummary:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @classmethod
    def from_cart(cls, cart: CartSnapshot, shipping_fee: Decimal, tax_rate: Decimal) -> "CheckoutSummary":
        """Flat shipping plus tax rounded to the nearest whole unit"""
        subtotal = cart.total_amount
        shipping = shipping_fee if not cart.is_empty else Decimal("0")
        tax = (subtotal * tax_rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(subtotal=subtotal, shipping=shipping, tax=tax, total=subtotal + shipping + tax)


# =============================================================================
# Orders and Inquiries
# =============================================================================

@dataclass
class Order:
    id: str
    status: OrderStatus
    total: Decimal
    items: List[dict] = field(default_factory=list)
    order_number: str = ""
    payment_status: str = "Pending"
    payment_method: str = "COD"
    shipping_address: Optional[Address] = None
    created_at: Optional[datetime] = None
    tracking_number: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        address = data.get("shippingAddress")
        return cls(
            id=ref_id(data),
            status=OrderStatus.parse(data.get("status")),
            total=to_decimal(data.get("total", data.get("totalAmount"))),
            items=list(data.get("items") or []),
            order_number=data.get("orderNumber", "") or "",
            payment_status=data.get("paymentStatus", "Pending") or "Pending",
            payment_method=data.get("paymentMethod", "COD") or "COD",
            shipping_address=Address.from_dict(address) if isinstance(address, dict) else None,
            created_at=parse_datetime(data.get("orderDate") or data.get("createdAt")),
            tracking_number=data.get("trackingNumber", "") or "",
        )

    @property
    def display_id(self) -> str:
        return self.order_number or self.id[-8:].upper()

    @property
    def item_count(self) -> int:
        return sum(int(item.get("quantity") or 0) for item in self.items)


@dataclass
class Inquiry:
    id: str
    subject: str
    status: InquiryStatus
    customer_name: str = ""
    customer_email: str = ""
    tailor_id: str = ""
    is_read: bool = False
    messages: List[dict] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Inquiry":
        return cls(
            id=ref_id(data),
            subject=data.get("subject", ""),
            status=InquiryStatus.parse(data.get("status")),
            customer_name=data.get("customerName", "") or "",
            customer_email=data.get("customerEmail", "") or "",
            tailor_id=ref_id(data.get("tailor")),
            is_read=bool(data.get("isRead", False)),
            messages=list(data.get("messages") or []),
            created_at=parse_datetime(data.get("createdAt")),
        )

    @property
    def last_message(self) -> str:
        if not self.messages:
            return ""
        return self.messages[-1].get("message", "")
