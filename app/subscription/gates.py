"""
Per-user feature gates driven by the user's plan limits.
"""

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Callable, Optional

from .models import (
    UNLIMITED,
    DAILY_FEEDBACK_LIMIT,
    GateResult,
    DailyUserUsage,
    UserTotals,
    FeatureUsageData,
    UsageLimits,
)
from .services import SubscriptionService

logger = logging.getLogger(__name__)


def utc_today() -> date:
    """Daily counters roll over at midnight UTC."""
    return datetime.now(timezone.utc).date()


def _under_limit(used: int, limit: int) -> bool:
    return limit == UNLIMITED or used < limit


class FeatureGates:
    """
    Checks and counts plan-limited actions of signed-in users.

    Daily counters (menu scrapes, feedback) are keyed by UTC date; totals
    (saved restaurants, tags) never reset.
    """

    def __init__(
        self,
        subscription_service: SubscriptionService,
        usage_file: Path,
        today: Callable[[], date] = utc_today,
    ):
        """
        Initialize FeatureGates.

        Args:
            subscription_service: Resolves each user's plan limits
            usage_file: Path to feature_usage.json
            today: Returns the current UTC date
        """
        self.subscription_service = subscription_service
        self.usage_file = usage_file
        self.today = today
        self._lock = RLock()

        if not self.usage_file.exists():
            self._save_data(FeatureUsageData.empty())

    # =====================
    # Gates
    # =====================

    def can_scrape_restaurant(self, uid: str) -> bool:
        limits = self._limits(uid)
        return _under_limit(self.get_daily_usage(uid).restaurant_scrapes, limits.daily_restaurant_scrapes)

    def can_save_restaurant(self, uid: str) -> bool:
        limits = self._limits(uid)
        return _under_limit(self.get_user_totals(uid).saved_restaurants_count, limits.max_saved_restaurants)

    def is_over_saved_restaurant_limit(self, uid: str) -> bool:
        """True when a downgrade left the user above the plan's saved limit."""
        limit = self._limits(uid).max_saved_restaurants
        if limit == UNLIMITED:
            return False
        return self.get_user_totals(uid).saved_restaurants_count > limit

    def can_create_tag(self, uid: str) -> bool:
        return self._limits(uid).can_create_tags

    def can_use_comparison(self, uid: str) -> bool:
        return self._limits(uid).comparison_tool

    def can_send_feedback(self, uid: str) -> bool:
        return self.get_daily_usage(uid).feedback_requests < DAILY_FEEDBACK_LIMIT

    # =====================
    # Counters
    # =====================

    def increment_restaurant_scrape(self, uid: str) -> GateResult:
        """Count a menu scrape if the plan allows another one today."""
        limits = self._limits(uid)
        with self._lock:
            data = self._clean_old_entries(self._load_data())
            blocked = self._over_saved_limit_result(data, uid, limits)
            if blocked:
                return blocked

            usage = self._daily_entry(data, uid)
            limit = limits.daily_restaurant_scrapes
            if not _under_limit(usage.restaurant_scrapes, limit):
                if limit == 5:
                    message = f"Daily scraping limit reached ({limit}). Upgrade to Pro for more!"
                else:
                    message = f"Daily scraping limit reached ({limit}). Upgrade to Premium for unlimited scrapes!"
                return GateResult(allowed=False, message=message)

            usage.restaurant_scrapes += 1
            self._save_data(data)
        logger.info(f"Incremented scrape usage: user:{uid} -> {usage.restaurant_scrapes}")
        return GateResult(allowed=True)

    def decrement_restaurant_scrape(self, uid: str) -> None:
        """Refund a scrape whose extraction failed."""
        with self._lock:
            data = self._clean_old_entries(self._load_data())
            usage = self._daily_entry(data, uid)
            usage.restaurant_scrapes = max(0, usage.restaurant_scrapes - 1)
            self._save_data(data)
        logger.info(f"Refunded 1 scrape due to failed extraction: user:{uid} -> {usage.restaurant_scrapes}")

    def increment_saved_restaurant(self, uid: str) -> GateResult:
        limits = self._limits(uid)
        with self._lock:
            data = self._load_data()
            blocked = self._over_saved_limit_result(data, uid, limits)
            if blocked:
                return blocked

            totals = self._totals_entry(data, uid)
            limit = limits.max_saved_restaurants
            if not _under_limit(totals.saved_restaurants_count, limit):
                plan = "Pro" if limit == 5 else "Premium"
                return GateResult(
                    allowed=False,
                    message=f"Saved restaurants limit reached ({limit}). Upgrade to {plan} for more saves!",
                )

            totals.saved_restaurants_count += 1
            self._save_data(data)
        logger.info(f"Updated totals for {uid}: saved={totals.saved_restaurants_count}")
        return GateResult(allowed=True)

    def decrement_saved_restaurant(self, uid: str) -> None:
        with self._lock:
            data = self._load_data()
            totals = self._totals_entry(data, uid)
            totals.saved_restaurants_count = max(0, totals.saved_restaurants_count - 1)
            self._save_data(data)

    def increment_tag(self, uid: str) -> GateResult:
        """Count a created tag; tags are a Premium feature."""
        if not self.can_create_tag(uid):
            return GateResult(allowed=False, message="Custom tags are available on the Premium plan.")
        with self._lock:
            data = self._load_data()
            self._totals_entry(data, uid).tags_count += 1
            self._save_data(data)
        return GateResult(allowed=True)

    def decrement_tag(self, uid: str) -> None:
        with self._lock:
            data = self._load_data()
            totals = self._totals_entry(data, uid)
            totals.tags_count = max(0, totals.tags_count - 1)
            self._save_data(data)

    def increment_feedback_request(self, uid: str) -> GateResult:
        with self._lock:
            data = self._clean_old_entries(self._load_data())
            usage = self._daily_entry(data, uid)
            if usage.feedback_requests >= DAILY_FEEDBACK_LIMIT:
                return GateResult(
                    allowed=False,
                    message=f"Daily feedback limit reached ({DAILY_FEEDBACK_LIMIT} per day). Try again tomorrow!",
                )
            usage.feedback_requests += 1
            self._save_data(data)
        return GateResult(allowed=True)

    # =====================
    # Reporting
    # =====================

    def get_daily_usage(self, uid: str) -> DailyUserUsage:
        today = self.today().isoformat()
        with self._lock:
            usage = self._load_data().daily.get(f"user:{uid}")
        if usage and usage.date == today:
            return usage
        return DailyUserUsage(date=today)

    def get_user_totals(self, uid: str) -> UserTotals:
        with self._lock:
            return self._load_data().totals.get(uid) or UserTotals()

    def get_usage_stats(self, uid: str) -> dict:
        """Usage against plan limits, for the account page."""
        limits = self._limits(uid)
        daily = self.get_daily_usage(uid)
        totals = self.get_user_totals(uid)
        return {
            "daily_scrapes_used": daily.restaurant_scrapes,
            "daily_scrapes_limit": limits.daily_restaurant_scrapes,
            "saved_restaurants_used": totals.saved_restaurants_count,
            "saved_restaurants_limit": limits.max_saved_restaurants,
            "tags_used": totals.tags_count,
            "plan_name": self.subscription_service.get_tier(uid).value,
        }

    # =====================
    # Private helper methods
    # =====================

    def _limits(self, uid: str) -> UsageLimits:
        return self.subscription_service.get_limits(uid)

    def _daily_entry(self, data: FeatureUsageData, uid: str) -> DailyUserUsage:
        """Today's counters for the user, attached to ``data``."""
        key = f"user:{uid}"
        usage = data.daily.get(key)
        if usage is None:
            usage = data.daily[key] = DailyUserUsage(date=self.today().isoformat())
        return usage

    def _totals_entry(self, data: FeatureUsageData, uid: str) -> UserTotals:
        totals = data.totals.get(uid)
        if totals is None:
            totals = data.totals[uid] = UserTotals()
        return totals

    def _over_saved_limit_result(
        self, data: FeatureUsageData, uid: str, limits: UsageLimits
    ) -> Optional[GateResult]:
        limit = limits.max_saved_restaurants
        totals = data.totals.get(uid) or UserTotals()
        if limit == UNLIMITED or totals.saved_restaurants_count <= limit:
            return None
        return GateResult(
            allowed=False,
            message=(
                f"You have exceeded your plan's limit of {limit} saved "
                f"restaurants. Please remove some restaurants to continue."
            ),
        )

    def _load_data(self) -> FeatureUsageData:
        """Load feature usage data from file."""
        try:
            if self.usage_file.exists():
                with open(self.usage_file, 'r', encoding='utf-8') as f:
                    return FeatureUsageData.from_dict(json.load(f))
        except Exception as e:
            logger.error(f"Error loading feature usage data: {e}")
        return FeatureUsageData.empty()

    def _save_data(self, data: FeatureUsageData) -> None:
        """Save feature usage data to file."""
        try:
            self.usage_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.usage_file, 'w', encoding='utf-8') as f:
                json.dump(data.to_dict(), f, ensure_ascii=False, indent=2)
        except Exception as e:
            logger.error(f"Error saving feature usage data: {e}")

    def _clean_old_entries(self, data: FeatureUsageData) -> FeatureUsageData:
        """Remove daily entries from previous days."""
        today = self.today().isoformat()
        data.daily = {k: v for k, v in data.daily.items() if v.date == today}
        return data
