"""
Daily free-use tracker for anonymous visitors.
"""

import json
import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Union

from .models import (
    GuestFeature,
    UsageRecord,
    FeatureUsage,
    GuestQuotaSettings,
    FEATURE_DISPLAY_NAMES,
    EXHAUSTED_MESSAGE,
    SIGNUP_LABEL,
)
from .notifications import CallToAction, Notification, Notifier
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "guestUsage"

FeatureLike = Union[GuestFeature, str]
UsageListener = Callable[[Dict[GuestFeature, FeatureUsage]], None]


def parse_records(raw: Optional[str]) -> Optional[Dict[GuestFeature, UsageRecord]]:
    """
    Parse a visitor's stored usage.

    Returns None when the payload is corrupt; malformed entries inside a
    valid payload are skipped.
    """
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    records = {}
    for name, value in data.items():
        feature = GuestFeature.parse(name)
        record = UsageRecord.from_dict(value)
        if feature is not None and record is not None:
            records[feature] = record
    return records


def has_usage_for(raw: Optional[str], day: date) -> bool:
    """True if the stored payload holds at least one record dated ``day``."""
    records = parse_records(raw)
    return bool(records) and any(r.is_for(day) for r in records.values())


class GuestUsageTracker:
    """
    Tracks how many free uses of each gated feature a visitor has left today.

    Access checks and usage registration are separate steps: callers check
    before the backend call and register only after it succeeded, so a
    failed attempt never costs quota.

    Counts live under one store key as a JSON object mapping feature name
    to ``{"count": int, "date": "YYYY-MM-DD"}``. A record dated before today
    counts as zero and is dropped on the next registration; nothing runs
    at midnight.

    Unreadable or corrupt storage counts as no usage.
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[GuestQuotaSettings] = None,
        notifier: Optional[Notifier] = None,
        today: Callable[[], date] = date.today,
        namespace: str = STORAGE_PREFIX,
    ):
        """
        Initialize GuestUsageTracker.

        Args:
            store: Key-value store holding the usage records
            settings: Daily limits and sign-up target
            notifier: Receives the quota-exhausted notification
            today: Returns the current local date
            namespace: Store key for this visitor's records
        """
        self.store = store
        self.settings = settings or GuestQuotaSettings()
        self.notifier = notifier
        self.today = today
        self.storage_key = namespace
        self._listeners: List[UsageListener] = []

    def get_remaining_uses(self, feature: FeatureLike) -> int:
        """Remaining free uses of a feature today."""
        parsed = GuestFeature.parse(feature)
        if parsed is None:
            logger.debug(f"Unknown guest feature {feature!r}, reporting default limit")
            return self.settings.daily_limit
        return max(0, self.settings.limit_for(parsed) - self._count_today(parsed))

    def has_free_tries_for(self, feature: FeatureLike) -> bool:
        return self.get_remaining_uses(feature) > 0

    def check_feature_access(self, feature: FeatureLike) -> bool:
        """
        Gate a feature before its backend call.

        Returns False and emits a sign-up notification when the quota is
        used up. Never changes the stored count.
        """
        parsed = GuestFeature.parse(feature)
        if parsed is None or self.has_free_tries_for(parsed):
            return True

        logger.info(f"Guest quota exhausted: key={self.storage_key}, feature={parsed.value}")
        if self.notifier is not None:
            self.notifier.notify(self._exhausted_notification(parsed))
        return False

    def register_usage(self, feature: FeatureLike) -> None:
        """Count one successful use of a feature and refresh listeners."""
        parsed = GuestFeature.parse(feature)
        if parsed is None:
            logger.warning(f"Ignoring usage for unknown guest feature {feature!r}")
            return

        today = self.today()
        # only today's records are written back; older days are dropped
        records = {f: r for f, r in self._load_records().items() if r.is_for(today)}
        record = records.get(parsed) or UsageRecord.fresh(today)
        record.count += 1
        records[parsed] = record

        self._save_records(records)
        logger.info(f"Registered guest usage: {self.storage_key}/{parsed.value} -> {record.count}")
        self._notify_listeners()

    def get_all_usage(self) -> Dict[GuestFeature, FeatureUsage]:
        """Usage snapshot for every gated feature."""
        today = self.today()
        records = self._load_records()
        usage = {}
        for feature in GuestFeature:
            record = records.get(feature)
            used = record.count if record and record.is_for(today) else 0
            total = self.settings.limit_for(feature)
            usage[feature] = FeatureUsage(
                feature=feature,
                used=used,
                remaining=max(0, total - used),
                total=total,
            )
        return usage

    def subscribe(self, listener: UsageListener) -> Callable[[], None]:
        """
        Register a callback that receives a fresh snapshot after each
        registered use.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        """Forget all usage for this visitor."""
        try:
            self.store.delete(self.storage_key)
        except Exception as e:
            logger.error(f"Error resetting guest usage {self.storage_key}: {e}")
            return
        logger.info(f"Reset guest usage: {self.storage_key}")
        self._notify_listeners()

    # =====================
    # Private helper methods
    # =====================

    def _count_today(self, feature: GuestFeature) -> int:
        record = self._load_records().get(feature)
        if record and record.is_for(self.today()):
            return record.count
        return 0

    def _load_records(self) -> Dict[GuestFeature, UsageRecord]:
        """Load this visitor's records, skipping anything unreadable."""
        try:
            raw = self.store.read(self.storage_key)
        except Exception as e:
            logger.error(f"Error reading guest usage {self.storage_key}: {e}")
            return {}
        records = parse_records(raw)
        if records is None:
            logger.warning(f"Discarding corrupt guest usage for {self.storage_key}")
            return {}
        return records

    def _save_records(self, records: Dict[GuestFeature, UsageRecord]) -> None:
        payload = json.dumps({f.value: r.to_dict() for f, r in records.items()})
        try:
            self.store.write(self.storage_key, payload)
        except Exception as e:
            logger.error(f"Error saving guest usage {self.storage_key}: {e}")

    def _notify_listeners(self) -> None:
        if not self._listeners:
            return
        snapshot = self.get_all_usage()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Guest usage listener failed: {e}")

    def _exhausted_notification(self, feature: GuestFeature) -> Notification:
        name = FEATURE_DISPLAY_NAMES[feature]
        return Notification(
            message=EXHAUSTED_MESSAGE.format(name=name),
            level="error",
            action=CallToAction(label=SIGNUP_LABEL, target=self.settings.signup_path),
            duration_ms=self.settings.notification_duration_ms,
        )
