"""
Factory for creating search throttle components.
"""

from .routes import create_search_throttle_blueprint
from .services import SearchThrottleService
from .throttle import ThrottleConfig


def create_search_throttle_module(
    max_requests: int = 10,
    window_seconds: float = 24 * 60 * 60,
    block_seconds: float = 60 * 60,
) -> dict:
    """
    Create search throttle module.

    Returns:
        Dictionary with:
        - service: SearchThrottleService instance
        - blueprint: Flask blueprint
    """
    config = ThrottleConfig(
        max_requests=max_requests,
        window_seconds=window_seconds,
        block_seconds=block_seconds,
    )
    service = SearchThrottleService(config)

    return {
        "service": service,
        "blueprint": create_search_throttle_blueprint(service),
    }
