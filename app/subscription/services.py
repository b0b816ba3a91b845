"""
Subscription status lookup with a short-lived cache.
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Protocol, Tuple

import requests

from .models import SubscriptionStatus, SubscriptionTier, UsageLimits, PLAN_LIMITS

logger = logging.getLogger(__name__)


class StatusFetcher(Protocol):
    def fetch(self, uid: str) -> SubscriptionStatus:
        ...


class ConfiguredStatusFetcher:
    """Resolves plans from user id lists in the configuration."""

    def __init__(self, pro_users: List[str] = None, premium_users: List[str] = None):
        self.pro_users = set(pro_users or [])
        self.premium_users = set(premium_users or [])

    def fetch(self, uid: str) -> SubscriptionStatus:
        if uid in self.premium_users:
            return SubscriptionStatus(subscribed=True, subscription_tier=SubscriptionTier.PREMIUM)
        if uid in self.pro_users:
            return SubscriptionStatus(subscribed=True, subscription_tier=SubscriptionTier.PRO)
        return SubscriptionStatus.free()


class RemoteStatusFetcher:
    """Asks the backend's check-subscription function for a user's plan."""

    def __init__(self, check_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.check_url = check_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, uid: str) -> SubscriptionStatus:
        resp = self.session.post(self.check_url, json={"user_id": uid}, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected check-subscription payload: {data!r}")
        return SubscriptionStatus.from_response(data)


class SubscriptionService:
    """
    Resolves a user's subscription, caching results for ``cache_seconds``.

    A failed lookup falls back to the last cached status unless a refresh
    was forced; with nothing cached the user is treated as free. Entries
    older than ``stale_seconds`` are evicted, so the fallback only covers
    users seen recently.
    """

    def __init__(
        self,
        fetcher: StatusFetcher,
        cache_seconds: int = 300,
        clock: Callable[[], float] = time.time,
        stale_seconds: int = 24 * 60 * 60,
    ):
        self.fetcher = fetcher
        self.cache_seconds = cache_seconds
        self.clock = clock
        self.stale_seconds = stale_seconds
        self._last_eviction = clock()
        self._cache: Dict[str, Tuple[SubscriptionStatus, float]] = {}

    def get_status(self, uid: Optional[str], force_refresh: bool = False) -> SubscriptionStatus:
        if not uid:
            return SubscriptionStatus.free()

        cached = self._cache.get(uid)
        now = self.clock()
        if not force_refresh and cached and now - cached[1] < self.cache_seconds:
            return cached[0]

        try:
            status = self.fetcher.fetch(uid)
        except Exception as e:
            logger.error(f"Error checking subscription for {uid}: {e}")
            if cached and not force_refresh:
                logger.info(f"Using cached subscription for {uid} due to lookup error")
                return cached[0]
            return SubscriptionStatus.free()

        previous = cached[0] if cached else None
        if previous and previous.subscription_tier != status.subscription_tier:
            logger.info(
                f"Subscription changed for {uid}: "
                f"{previous.subscription_tier.value} -> {status.subscription_tier.value}"
            )
        self._cache[uid] = (status, now)
        self._evict_stale(now)
        return status

    def get_tier(self, uid: Optional[str]) -> SubscriptionTier:
        return self.get_status(uid).subscription_tier

    def get_limits(self, uid: Optional[str]) -> UsageLimits:
        return PLAN_LIMITS[self.get_tier(uid)]

    def invalidate(self, uid: str) -> None:
        self._cache.pop(uid, None)

    def _evict_stale(self, now: float) -> None:
        if now - self._last_eviction < self.cache_seconds:
            return
        self._last_eviction = now
        stale = [uid for uid, (_, fetched_at) in list(self._cache.items()) if now - fetched_at >= self.stale_seconds]
        for uid in stale:
            self._cache.pop(uid, None)
