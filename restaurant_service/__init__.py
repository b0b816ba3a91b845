# Restaurant service package: result models, ordering and tag filtering

from .models import Restaurant, RestaurantTag
from .sorting import SortOption, sort_restaurants, sort_by_price_preference, distance_value
from .tag_filter import filter_restaurants_by_tags, lookup_from_tags
from .logging_config import (
    setup_logging,
    stop_logging,
    get_logger,
    ThreadSafeLoggingConfig,
)

__all__ = [
    "Restaurant",
    "RestaurantTag",
    "SortOption",
    "sort_restaurants",
    "sort_by_price_preference",
    "distance_value",
    "filter_restaurants_by_tags",
    "lookup_from_tags",
    "setup_logging",
    "stop_logging",
    "get_logger",
    "ThreadSafeLoggingConfig",
]
