"""
Subscription plans and per-user feature gates.
Supports Free, Pro and Premium tiers.
"""

from .models import (
    SubscriptionTier,
    SubscriptionStatus,
    UsageLimits,
    GateResult,
    PLAN_LIMITS,
    normalize_subscription_tier,
)
from .services import SubscriptionService
from .gates import FeatureGates

__all__ = [
    "SubscriptionTier",
    "SubscriptionStatus",
    "UsageLimits",
    "GateResult",
    "PLAN_LIMITS",
    "normalize_subscription_tier",
    "SubscriptionService",
    "FeatureGates",
]
