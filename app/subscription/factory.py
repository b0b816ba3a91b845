"""
Factory for creating subscription components.
"""

from pathlib import Path
from typing import List

from .gates import FeatureGates
from .routes import create_subscription_blueprint
from .services import SubscriptionService, ConfiguredStatusFetcher, RemoteStatusFetcher


def create_subscription_module(
    data_dir: Path,
    pro_users: List[str] = None,
    premium_users: List[str] = None,
    cache_seconds: int = 300,
    check_url: str = "",
    request_timeout: float = 10.0,
) -> dict:
    """
    Create subscription module.

    Args:
        data_dir: Directory for the feature usage file
        pro_users: User IDs on the Pro plan (used without check_url)
        premium_users: User IDs on the Premium plan (used without check_url)
        cache_seconds: How long a looked-up status is reused
        check_url: Backend check-subscription endpoint; empty uses the lists
        request_timeout: HTTP timeout for check_url in seconds

    Returns:
        Dictionary with:
        - service: SubscriptionService instance
        - gates: FeatureGates instance
        - blueprint: Flask blueprint
    """
    if check_url:
        fetcher = RemoteStatusFetcher(check_url, timeout=request_timeout)
    else:
        fetcher = ConfiguredStatusFetcher(pro_users=pro_users, premium_users=premium_users)

    service = SubscriptionService(fetcher=fetcher, cache_seconds=cache_seconds)
    gates = FeatureGates(
        subscription_service=service,
        usage_file=data_dir / "feature_usage.json",
    )

    return {
        "service": service,
        "gates": gates,
        "blueprint": create_subscription_blueprint(service, gates),
    }
