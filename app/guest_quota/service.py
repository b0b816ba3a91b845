"""
Hands out per-visitor trackers that share one store.
"""

import logging
import uuid
from datetime import date
from threading import Lock
from typing import Optional

from flask import request

from .models import GuestQuotaSettings
from .notifications import Notifier
from .storage import KeyValueStore
from .tracker import GuestUsageTracker, FeatureLike, STORAGE_PREFIX, has_usage_for

logger = logging.getLogger(__name__)

GUEST_COOKIE = "guest_id"


class GuestQuotaService:
    """Resolves the visiting browser and builds its usage tracker."""

    def __init__(self, store: KeyValueStore, settings: GuestQuotaSettings, today=None):
        self.store = store
        self.settings = settings
        self._today = today
        self._lock = Lock()
        self._last_cleaned: Optional[date] = None

    def tracker_for(self, visitor_id: str, notifier: Optional[Notifier] = None) -> GuestUsageTracker:
        """Create a tracker scoped to one visitor's namespace."""
        kwargs = {"today": self._today} if self._today else {}
        return GuestUsageTracker(
            store=self.store,
            settings=self.settings,
            notifier=notifier,
            namespace=f"{STORAGE_PREFIX}:{visitor_id}",
            **kwargs,
        )

    def register_within_limit(self, tracker: GuestUsageTracker, feature: FeatureLike) -> bool:
        """
        Count a use only while free tries remain.

        The limit check and the increment run under one lock, so concurrent
        registrations cannot push a visitor past the daily limit.

        Returns:
            True if the use was counted
        """
        with self._lock:
            self._clean_if_new_day(tracker.today())
            if not tracker.has_free_tries_for(feature):
                logger.info(f"Refused guest usage past limit: {tracker.storage_key}/{feature}")
                return False
            tracker.register_usage(feature)
            return True

    def clean_old_entries(self, today: date) -> int:
        """Delete visitor namespaces with no usage dated ``today``."""
        prefix = f"{STORAGE_PREFIX}:"
        try:
            removed = self.store.prune(
                lambda key, raw: key.startswith(prefix) and not has_usage_for(raw, today)
            )
        except Exception as e:
            logger.error(f"Error cleaning old guest usage: {e}")
            return 0
        if removed:
            logger.info(f"Removed {removed} stale guest usage entries")
        return removed

    def get_visitor_id(self) -> tuple[str, bool]:
        """
        Get the visitor id from cookies.

        Returns:
            Tuple of (visitor_id, is_new). A new id still needs to be set
            as a cookie on the response.
        """
        visitor_id = request.cookies.get(GUEST_COOKIE)
        if visitor_id:
            return visitor_id, False
        visitor_id = uuid.uuid4().hex
        logger.debug(f"Issuing new guest id {visitor_id}")
        return visitor_id, True

    def is_signed_in(self) -> bool:
        """Signed-in users are not subject to guest quotas."""
        return bool(request.cookies.get("uid"))

    def _clean_if_new_day(self, today: date) -> None:
        if self._last_cleaned != today:
            self.clean_old_entries(today)
            self._last_cleaned = today
