"""
Data models for the guest usage quota system.
"""

from enum import Enum
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional


class GuestFeature(Enum):
    """Features gated by a daily free-use quota for anonymous visitors."""
    SEARCH = "search"
    SCRAPE = "scrape"
    AI_ANALYSIS = "ai_analysis"
    COMPARISON = "comparison"

    @classmethod
    def is_valid(cls, feature: str) -> bool:
        """Check if a feature string is valid."""
        try:
            cls(feature)
            return True
        except ValueError:
            return False

    @classmethod
    def parse(cls, feature) -> Optional["GuestFeature"]:
        """Return the matching feature, or None for an unknown name."""
        if isinstance(feature, cls):
            return feature
        try:
            return cls(feature)
        except ValueError:
            return None


FEATURE_DISPLAY_NAMES: Dict[GuestFeature, str] = {
    GuestFeature.SEARCH: "Restaurant Search",
    GuestFeature.SCRAPE: "Menu Scraping",
    GuestFeature.AI_ANALYSIS: "AI Analysis",
    GuestFeature.COMPARISON: "Restaurant Comparison",
}

EXHAUSTED_MESSAGE = "You've used all your free {name} tries. Sign up to continue!"
SIGNUP_LABEL = "Sign Up"


@dataclass
class UsageRecord:
    """Uses of one feature on one local calendar day."""
    count: int
    date: str  # ISO format date (YYYY-MM-DD)

    def is_for(self, day: date) -> bool:
        return self.date == day.isoformat()

    def to_dict(self) -> dict:
        return {"count": self.count, "date": self.date}

    @classmethod
    def from_dict(cls, data) -> Optional["UsageRecord"]:
        """Build a record from stored data, or None if it is malformed."""
        if not isinstance(data, dict):
            return None
        count = data.get("count")
        day = data.get("date")
        # bool is an int subclass; a stored true/false is not a count
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            return None
        if not isinstance(day, str):
            return None
        try:
            date.fromisoformat(day)
        except ValueError:
            return None
        return cls(count=count, date=day)

    @classmethod
    def fresh(cls, day: date) -> "UsageRecord":
        return cls(count=0, date=day.isoformat())


@dataclass
class FeatureUsage:
    """Snapshot of one feature's quota for display."""
    feature: GuestFeature
    used: int
    remaining: int
    total: int

    def to_dict(self) -> dict:
        return {
            "feature": self.feature.value,
            "used": self.used,
            "remaining": self.remaining,
            "total": self.total,
        }


@dataclass
class GuestQuotaSettings:
    """Daily limits for anonymous visitors."""
    daily_limit: int = 3
    feature_limits: Dict[str, int] = field(default_factory=dict)
    signup_path: str = "/auth"
    notification_duration_ms: int = 5000

    def limit_for(self, feature: GuestFeature) -> int:
        """Get the daily limit for a feature, falling back to the default."""
        return self.feature_limits.get(feature.value, self.daily_limit)
