"""
State Management
Session, cart and catalog state holders, each owned by one AppState.
"""

from .session import Session, SessionManager
from .cart import CartStore
from .catalog import (
    FabricCatalog,
    TailorCatalog,
    FabricFilters,
    TailorFilters,
    FabricSort,
    TailorSort,
    parse_price_range,
)
from .tokens import TokenStore, FileTokenStore, MemoryTokenStore
from .store import AppState, build_app_state

__all__ = [
    "Session",
    "SessionManager",
    "CartStore",
    "FabricCatalog",
    "TailorCatalog",
    "FabricFilters",
    "TailorFilters",
    "FabricSort",
    "TailorSort",
    "parse_price_range",
    "TokenStore",
    "FileTokenStore",
    "MemoryTokenStore",
    "AppState",
    "build_app_state",
]
