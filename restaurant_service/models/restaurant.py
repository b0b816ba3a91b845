"""
Restaurant data models.

This module contains Pydantic models for restaurants returned by search
and the tag links users attach to them.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

PriceLevel = Literal["$", "$$", "$$$", "$$$$"]


class Restaurant(BaseModel):
    """A restaurant as shown in search results."""
    id: str = Field(description="Restaurant ID")
    name: str = Field(description="Display name")
    image_url: str = Field(default="", description="Cover image URL")
    cuisine_type: str = Field(default="", description="Primary cuisine")
    rating: float = Field(default=0.0, description="Average rating (0-5)")
    price_level: Optional[PriceLevel] = Field(default=None, description="Price level from $ to $$$$")
    address: str = Field(default="", description="Street address")
    distance: str = Field(default="", description="Human-readable distance, e.g. '2.4 km away'")
    dietary_options: List[str] = Field(default_factory=list, description="Dietary options offered")
    pros: List[str] = Field(default_factory=list, description="Review highlights")
    cons: List[str] = Field(default_factory=list, description="Review drawbacks")
    has_menu_extraction: bool = Field(default=False, description="Whether a menu has been scraped and extracted")
    place_id: Optional[str] = Field(default=None, description="Places API identifier")


class RestaurantTag(BaseModel):
    """A user's tag attached to a restaurant."""
    restaurant_id: str = Field(description="Tagged restaurant ID")
    tag_id: str = Field(description="Tag ID")
    tag_name: Optional[str] = Field(default=None, description="Tag label")
    color: Optional[str] = Field(default=None, description="Tag color")
