"""
Guest quota module.
Daily free-use limits per gated feature for visitors who have not signed up.
"""

from .models import GuestFeature, UsageRecord, FeatureUsage, GuestQuotaSettings
from .notifications import Notification, CallToAction, NotificationQueue
from .storage import InMemoryStore, JsonFileStore
from .tracker import GuestUsageTracker

__all__ = [
    "GuestFeature",
    "UsageRecord",
    "FeatureUsage",
    "GuestQuotaSettings",
    "Notification",
    "CallToAction",
    "NotificationQueue",
    "InMemoryStore",
    "JsonFileStore",
    "GuestUsageTracker",
]
