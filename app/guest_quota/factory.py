"""
Factory for creating guest quota components.
"""

from pathlib import Path
from typing import Dict, Optional

from .models import GuestQuotaSettings
from .routes import create_guest_quota_blueprint
from .service import GuestQuotaService
from .storage import JsonFileStore


def create_guest_quota_module(
    data_dir: Path,
    daily_limit: int = 3,
    feature_limits: Optional[Dict[str, int]] = None,
    signup_path: str = "/auth",
    notification_duration_ms: int = 5000,
) -> dict:
    """
    Create guest quota module.

    Args:
        data_dir: Directory for the guest usage file
        daily_limit: Free uses per feature per day
        feature_limits: Per-feature overrides of daily_limit
        signup_path: Navigation target of the sign-up action
        notification_duration_ms: How long the exhausted toast stays up

    Returns:
        Dictionary with:
        - service: GuestQuotaService instance
        - store: JsonFileStore instance
        - blueprint: Flask blueprint
    """
    settings = GuestQuotaSettings(
        daily_limit=daily_limit,
        feature_limits=feature_limits or {},
        signup_path=signup_path,
        notification_duration_ms=notification_duration_ms,
    )

    store = JsonFileStore(data_dir / "guest_usage.json")
    service = GuestQuotaService(store=store, settings=settings)

    return {
        "service": service,
        "store": store,
        "blueprint": create_guest_quota_blueprint(service),
    }
