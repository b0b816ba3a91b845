"""
Tag-based filtering of restaurant lists.
"""

import logging
from typing import Callable, Iterable, List, Sequence

from .models import Restaurant, RestaurantTag

logger = logging.getLogger(__name__)

# Given tag IDs, returns the IDs of restaurants carrying any of them
TagLookup = Callable[[List[str]], Iterable[str]]


def lookup_from_tags(tags: Iterable[RestaurantTag]) -> TagLookup:
    """Build a TagLookup over an in-memory list of tag links."""
    links = list(tags)

    def lookup(tag_ids: List[str]) -> List[str]:
        wanted = set(tag_ids)
        return [link.restaurant_id for link in links if link.tag_id in wanted]

    return lookup


def filter_restaurants_by_tags(
    restaurants: Sequence[Restaurant],
    selected_tag_ids: Sequence[str],
    tag_lookup: TagLookup,
) -> List[Restaurant]:
    """
    Keep restaurants tagged with ANY of the selected tags.

    No selection returns every restaurant. A failing lookup is logged and
    the list returned unfiltered.
    """
    if not selected_tag_ids:
        return list(restaurants)

    try:
        tagged_ids = set(tag_lookup(list(selected_tag_ids)))
    except Exception as e:
        logger.error(f"Error filtering restaurants by tags: {e}")
        return list(restaurants)

    return [r for r in restaurants if r.id in tagged_ids]
