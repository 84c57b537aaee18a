"""
Typed Models for Frontend
Every backend payload is parsed into one of these before it reaches state or UI.
"""

from .marketplace import (
    Role,
    SessionStatus,
    OrderStatus,
    PaymentMethod,
    ShippingMethod,
    InquiryStatus,
    User,
    Address,
    Shop,
    Fabric,
    Tailor,
    CartItem,
    CartSnapshot,
    CheckoutSummary,
    Order,
    Inquiry,
    to_decimal,
    ref_id,
)

__all__ = [
    "Role",
    "SessionStatus",
    "OrderStatus",
    "PaymentMethod",
    "ShippingMethod",
    "InquiryStatus",
    "User",
    "Address",
    "Shop",
    "Fabric",
    "Tailor",
    "CartItem",
    "CartSnapshot",
    "CheckoutSummary",
    "Order",
    "Inquiry",
    "to_decimal",
    "ref_id",
]
