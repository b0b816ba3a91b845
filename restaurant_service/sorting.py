"""
Ordering helpers for restaurant result lists.
"""

import math
import re
from enum import Enum
from typing import List, Optional, Sequence

from .models import Restaurant

PRICE_ORDER = {"$": 1, "$$": 2, "$$$": 3, "$$$$": 4}

_LEADING_NUMBER = re.compile(r"^([\d.]+)")


class SortOption(Enum):
    """Sort choices offered above the results grid."""
    NAME_ASC = "name-asc"
    PRICE_ASC = "price-asc"
    DISTANCE_ASC = "distance-asc"
    MENU_SCRAPED = "menu-scraped"

    @classmethod
    def parse(cls, option) -> Optional["SortOption"]:
        if isinstance(option, cls):
            return option
        try:
            return cls(option)
        except ValueError:
            return None


def distance_value(distance: str) -> float:
    """Leading number of a distance label ("2.4 km away" -> 2.4), else infinity."""
    match = _LEADING_NUMBER.match(distance or "")
    if not match:
        return math.inf
    try:
        return float(match.group(1))
    except ValueError:
        return math.inf


def sort_restaurants(restaurants: Sequence[Restaurant], option) -> List[Restaurant]:
    """
    Return a sorted copy of the restaurants.

    Args:
        restaurants: Restaurants to sort
        option: SortOption or its string value; unknown options keep order

    Returns:
        New list; the input is not modified
    """
    option = SortOption.parse(option)
    result = list(restaurants)

    if option == SortOption.NAME_ASC:
        result.sort(key=lambda r: r.name.casefold())
    elif option == SortOption.PRICE_ASC:
        result.sort(key=lambda r: PRICE_ORDER.get(r.price_level, 0))
    elif option == SortOption.DISTANCE_ASC:
        result.sort(key=lambda r: distance_value(r.distance))
    elif option == SortOption.MENU_SCRAPED:
        # restaurants with extracted menus first
        result.sort(key=lambda r: not r.has_menu_extraction)

    return result


def sort_by_price_preference(
    restaurants: Sequence[Restaurant],
    preferred_price: Optional[str] = None,
) -> List[Restaurant]:
    """Move restaurants at the preferred price level to the front, keeping order otherwise."""
    if not preferred_price:
        return list(restaurants)
    return sorted(restaurants, key=lambda r: r.price_level != preferred_price)
