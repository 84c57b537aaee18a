from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


def format_price(amount: Optional[Number], currency: str = "₹") -> str:
    if amount is None:
        return f"{currency}0"
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return f"{currency}{int(value):,}"
    return f"{currency}{value:,.2f}"


def format_distance(distance_km: Optional[float]) -> str:
    if distance_km is None:
        return "Distance unavailable"
    if distance_km < 1:
        return f"{round(distance_km * 1000)}m away"
    return f"{distance_km:g}km away"


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%d %b %Y")


def format_rating(rating: float, reviews: int = 0) -> str:
    stars = "★" * int(round(rating)) + "☆" * (5 - int(round(rating)))
    if reviews:
        return f"{stars} {rating:.1f} ({reviews})"
    return f"{stars} {rating:.1f}"
