"""
Data models for subscription plans and per-user feature gates.
"""

from enum import Enum
from dataclasses import dataclass, asdict
from typing import Optional

UNLIMITED = -1
DAILY_FEEDBACK_LIMIT = 3


class SubscriptionTier(Enum):
    """Subscription plan tiers."""
    FREE = "free"
    PRO = "pro"
    PREMIUM = "premium"


_PREMIUM_LABELS = {"premium", "enterprise", "plus", "ultimate"}
_PRO_LABELS = {"pro", "professional", "basic", "starter", "standard"}


def normalize_subscription_tier(tier) -> SubscriptionTier:
    """Map the billing provider's plan label onto one of our tiers."""
    label = str(tier if tier is not None else "").strip().lower()
    if label in _PREMIUM_LABELS:
        return SubscriptionTier.PREMIUM
    if label in _PRO_LABELS:
        return SubscriptionTier.PRO
    return SubscriptionTier.FREE


@dataclass(frozen=True)
class UsageLimits:
    """What a plan allows. UNLIMITED (-1) disables a numeric limit."""
    daily_restaurant_scrapes: int
    max_saved_restaurants: int
    can_create_tags: bool
    comparison_tool: bool
    detailed_calories: bool
    ai_analysis: bool
    exclusive_discounts: bool
    priority_support: bool
    advanced_filters: bool

    def to_dict(self) -> dict:
        return asdict(self)


PLAN_LIMITS = {
    SubscriptionTier.FREE: UsageLimits(
        daily_restaurant_scrapes=5,
        max_saved_restaurants=5,
        can_create_tags=False,
        comparison_tool=False,
        detailed_calories=True,
        ai_analysis=False,
        exclusive_discounts=False,
        priority_support=False,
        advanced_filters=False,
    ),
    SubscriptionTier.PRO: UsageLimits(
        daily_restaurant_scrapes=15,
        max_saved_restaurants=20,
        can_create_tags=False,
        comparison_tool=True,
        detailed_calories=True,
        ai_analysis=False,
        exclusive_discounts=False,
        priority_support=False,
        advanced_filters=True,
    ),
    SubscriptionTier.PREMIUM: UsageLimits(
        daily_restaurant_scrapes=UNLIMITED,
        max_saved_restaurants=UNLIMITED,
        can_create_tags=True,
        comparison_tool=True,
        detailed_calories=True,
        ai_analysis=True,
        exclusive_discounts=True,
        priority_support=True,
        advanced_filters=True,
    ),
}


@dataclass
class SubscriptionStatus:
    """Current plan of a user."""
    subscribed: bool = False
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    subscription_end: Optional[str] = None  # ISO format datetime

    def to_dict(self) -> dict:
        return {
            "subscribed": self.subscribed,
            "subscription_tier": self.subscription_tier.value,
            "subscription_end": self.subscription_end,
        }

    @classmethod
    def free(cls) -> "SubscriptionStatus":
        return cls()

    @classmethod
    def from_response(cls, data: dict) -> "SubscriptionStatus":
        """
        Build a status from a check-subscription payload.

        The tier label has appeared under several keys; unsubscribed users
        are always free.
        """
        raw_tier = None
        for key in ("subscription_tier", "tier", "plan", "subscriptionTier", "current_tier"):
            if data.get(key) is not None:
                raw_tier = data[key]
                break
        subscribed = bool(data.get("subscribed"))
        return cls(
            subscribed=subscribed,
            subscription_tier=normalize_subscription_tier(raw_tier) if subscribed else SubscriptionTier.FREE,
            subscription_end=data.get("subscription_end"),
        )


@dataclass
class GateResult:
    """Outcome of a feature gate."""
    allowed: bool
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {"allowed": self.allowed, "message": self.message}


@dataclass
class DailyUserUsage:
    """Per-user counters for one UTC day."""
    date: str  # ISO format date (YYYY-MM-DD)
    restaurant_scrapes: int = 0
    feedback_requests: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "restaurant_scrapes": self.restaurant_scrapes,
            "feedback_requests": self.feedback_requests,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyUserUsage":
        return cls(
            date=data["date"],
            restaurant_scrapes=data.get("restaurant_scrapes", 0),
            feedback_requests=data.get("feedback_requests", 0),
        )


@dataclass
class UserTotals:
    """Running per-user totals."""
    saved_restaurants_count: int = 0
    tags_count: int = 0

    def to_dict(self) -> dict:
        return {
            "saved_restaurants_count": self.saved_restaurants_count,
            "tags_count": self.tags_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserTotals":
        return cls(
            saved_restaurants_count=data.get("saved_restaurants_count", 0),
            tags_count=data.get("tags_count", 0),
        )


@dataclass
class FeatureUsageData:
    """Complete feature-gate data structure for persistence."""
    daily: dict  # "user:{uid}" -> DailyUserUsage
    totals: dict  # "{uid}" -> UserTotals

    def to_dict(self) -> dict:
        return {
            "daily": {k: v.to_dict() for k, v in self.daily.items()},
            "totals": {k: v.to_dict() for k, v in self.totals.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeatureUsageData":
        daily = {}
        for k, v in data.get("daily", {}).items():
            if isinstance(v, dict) and "date" in v:
                daily[k] = DailyUserUsage.from_dict(v)

        totals = {}
        for k, v in data.get("totals", {}).items():
            if isinstance(v, dict):
                totals[k] = UserTotals.from_dict(v)

        return cls(daily=daily, totals=totals)

    @classmethod
    def empty(cls) -> "FeatureUsageData":
        return cls(daily={}, totals={})
