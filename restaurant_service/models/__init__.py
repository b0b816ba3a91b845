"""
Data models for restaurant results.
"""

from .restaurant import Restaurant, RestaurantTag, PriceLevel

__all__ = ["Restaurant", "RestaurantTag", "PriceLevel"]
