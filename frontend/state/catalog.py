"""
Catalog State Management
Fabric and tailor lists fetched once, plus a filtered/sorted view.

The view is never stored: ``filtered`` is recomputed from ``(all, filters)``
every time it is read, so it cannot drift from its inputs. Catalogs hold
tens to low hundreds of items, so a full filter + sort per read is fine.
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from models import Fabric, Tailor
from state.observable import Observable
from utils.api_client import fetch_all_pages
from utils.errors import MarketplaceError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F")


# =============================================================================
# Parsing
# =============================================================================

def parse_price_range(value: str) -> Tuple[Decimal, Optional[Decimal]]:
    """
    Parse ``"min-max"``, ``"min-"`` or ``"min"``.

    Returns ``(min, max)`` with ``max`` None when open-ended. A zero
    maximum also means open-ended, so ``"5000-0"`` reads as "5000 and up".
    """
    text = (value or "").strip()
    low, sep, high = text.partition("-")
    try:
        minimum = Decimal(low.strip())
        maximum = Decimal(high.strip()) if sep and high.strip() else None
    except InvalidOperation:
        raise ValidationError(f"Invalid price range: {value!r}") from None
    if not minimum.is_finite() or (maximum is not None and not maximum.is_finite()):
        raise ValidationError(f"Invalid price range: {value!r}")
    if not maximum:
        maximum = None
    if maximum is not None and maximum < minimum:
        raise ValidationError(f"Invalid price range: {value!r}")
    return minimum, maximum


def _parse_threshold(value: str, cast: Callable, label: str):
    try:
        number = cast(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value!r}") from None
    if not math.isfinite(number):
        raise ValidationError(f"Invalid {label}: {value!r}")
    return number


def _text(value) -> str:
    return str(value or "").strip()


def _contains(haystack: str, needle: str) -> bool:
    return needle.casefold() in (haystack or "").casefold()


def _same(a: str, b: str) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


# =============================================================================
# Sort Keys
# =============================================================================

class FabricSort(Enum):
    NAME = "name"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    STOCK = "stock"

    @property
    def label(self) -> str:
        labels = {
            "name": "Name (A-Z)",
            "price-low": "Price: Low to High",
            "price-high": "Price: High to Low",
            "stock": "Most in Stock",
        }
        return labels[self.value]

    def apply(self, fabrics: List[Fabric]) -> List[Fabric]:
        if self is FabricSort.PRICE_LOW:
            return sorted(fabrics, key=lambda f: f.price)
        if self is FabricSort.PRICE_HIGH:
            return sorted(fabrics, key=lambda f: f.price, reverse=True)
        if self is FabricSort.STOCK:
            return sorted(fabrics, key=lambda f: f.stock, reverse=True)
        return sorted(fabrics, key=lambda f: f.name.casefold())


class TailorSort(Enum):
    RATING = "rating"
    EXPERIENCE = "experience"
    NAME = "name"
    CITY = "city"

    @property
    def label(self) -> str:
        labels = {
            "rating": "Highest Rated",
            "experience": "Most Experienced",
            "name": "Name (A-Z)",
            "city": "City (A-Z)",
        }
        return labels[self.value]

    def apply(self, tailors: List[Tailor]) -> List[Tailor]:
        if self is TailorSort.RATING:
            return sorted(tailors, key=lambda t: t.rating, reverse=True)
        if self is TailorSort.EXPERIENCE:
            return sorted(tailors, key=lambda t: t.experience, reverse=True)
        if self is TailorSort.CITY:
            return sorted(tailors, key=lambda t: t.city.casefold())
        return sorted(tailors, key=lambda t: t.name.casefold())


# =============================================================================
# Filter Specs
# =============================================================================

@dataclass(frozen=True)
class FabricFilters:
    """Empty strings impose no constraint"""
    category: str = ""
    price_range: str = ""
    color: str = ""
    material: str = ""
    city: str = ""
    sort_by: FabricSort = FabricSort.NAME

    def __post_init__(self):
        object.__setattr__(self, "sort_by", FabricSort(self.sort_by))
        if _text(self.price_range):
            parse_price_range(self.price_range)

    def matches(self, fabric: Fabric) -> bool:
        if _text(self.category) and not _same(fabric.category, self.category):
            return False
        if _text(self.price_range):
            minimum, maximum = parse_price_range(self.price_range)
            if fabric.price < minimum or (maximum is not None and fabric.price > maximum):
                return False
        if _text(self.color) and not _contains(fabric.color, _text(self.color)):
            return False
        if _text(self.material) and not _contains(fabric.material, _text(self.material)):
            return False
        if _text(self.city) and not _same(fabric.shop_city, self.city):
            return False
        return True


@dataclass(frozen=True)
class TailorFilters:
    """Empty strings impose no constraint"""
    city: str = ""
    specialization: str = ""
    experience: str = ""
    rating: str = ""
    sort_by: TailorSort = TailorSort.RATING

    def __post_init__(self):
        object.__setattr__(self, "sort_by", TailorSort(self.sort_by))
        if _text(self.experience):
            _parse_threshold(self.experience, int, "experience")
        if _text(self.rating):
            _parse_threshold(self.rating, float, "rating")

    def matches(self, tailor: Tailor) -> bool:
        if _text(self.city) and not _same(tailor.city, self.city):
            return False
        if _text(self.specialization):
            needle = _text(self.specialization)
            if not any(_contains(skill, needle) for skill in tailor.specialization):
                return False
        if _text(self.experience) and tailor.experience < int(_text(self.experience)):
            return False
        if _text(self.rating) and tailor.rating < float(_text(self.rating)):
            return False
        return True


# =============================================================================
# Engine
# =============================================================================

def derive_view(items: Sequence[T], filters) -> List[T]:
    """``sort(filter(items, filters), filters.sort_by)``; pure"""
    return filters.sort_by.apply([item for item in items if filters.matches(item)])


def filter_fabrics(fabrics: Sequence[Fabric], filters: FabricFilters) -> List[Fabric]:
    return derive_view(fabrics, filters)


def filter_tailors(tailors: Sequence[Tailor], filters: TailorFilters) -> List[Tailor]:
    return derive_view(tailors, filters)


# =============================================================================
# Catalog Stores
# =============================================================================

class Catalog(Observable, Generic[T, F]):
    """
    Full list + filter spec; ``filtered`` is derived on read.

    Subclasses set the model, the filter spec type and the fetch call.
    """

    model: Callable[[dict], T]
    filter_type: type
    name = "catalog"

    def __init__(self, client):
        super().__init__()
        self._client = client
        self.all: List[T] = []
        self.filters: F = self.filter_type()
        self.loading = False
        self.error: Optional[str] = None

    @property
    def filtered(self) -> List[T]:
        return derive_view(self.all, self.filters)

    def _fetch(self, params: Optional[dict]) -> List[dict]:
        raise NotImplementedError

    def load(self, params: Optional[dict] = None) -> bool:
        """Fetch the full list; the current filters are kept"""
        self.loading = True
        self.error = None
        self._notify()
        try:
            items = [self.model(raw) for raw in self._fetch(params)]
        except MarketplaceError as e:
            logger.info("Could not load %s: %s", self.name, e)
            self.error = str(e)
            return False
        except (ValueError, TypeError) as e:
            logger.warning("Malformed %s payload: %s", self.name, e)
            self.error = f"Unexpected {self.name} data from server"
            return False
        finally:
            self.loading = False
            self._notify()
        self.set_items(items)
        return True

    def set_items(self, items: Sequence[T]) -> None:
        self.all = list(items)
        self._notify()

    def set_filters(self, **changes) -> bool:
        """Merge ``changes`` into the filter spec; invalid values are rejected"""
        try:
            self.filters = replace(self.filters, **changes)
        except (ValidationError, ValueError) as e:
            self.error = str(e)
            self._notify()
            return False
        self.error = None
        self._notify()
        return True

    def clear_filters(self) -> None:
        self.filters = self.filter_type()
        self.error = None
        self._notify()

    def options(self, field_name: str) -> List[str]:
        """Distinct non-empty values of ``field_name`` across ``all``, sorted"""
        values = set()
        for item in self.all:
            value = getattr(item, field_name, None)
            if isinstance(value, (list, tuple)):
                values.update(str(v) for v in value if v)
            elif value:
                values.add(str(value))
        return sorted(values, key=str.casefold)

    @property
    def active_filters(self) -> Dict[str, str]:
        return {
            f.name: getattr(self.filters, f.name)
            for f in fields(self.filters)
            if f.name != "sort_by" and _text(getattr(self.filters, f.name))
        }


class FabricCatalog(Catalog[Fabric, FabricFilters]):
    model = staticmethod(Fabric.from_dict)
    filter_type = FabricFilters
    name = "fabrics"

    def _fetch(self, params: Optional[dict]) -> List[dict]:
        return fetch_all_pages(self._client.get_fabrics, params)


class TailorCatalog(Catalog[Tailor, TailorFilters]):
    model = staticmethod(Tailor.from_dict)
    filter_type = TailorFilters
    name = "tailors"

    def _fetch(self, params: Optional[dict]) -> List[dict]:
        return fetch_all_pages(self._client.get_tailors, params)
