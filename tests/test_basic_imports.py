"""
Basic import tests to verify the core functionality.
"""


def test_guest_quota_imports():
    """Test that the guest quota package exposes its public API."""
    from app.guest_quota import (
        GuestFeature,
        GuestUsageTracker,
        InMemoryStore,
        JsonFileStore,
    )

    assert [f.value for f in GuestFeature] == ["search", "scrape", "ai_analysis", "comparison"]
    tracker = GuestUsageTracker(InMemoryStore())
    assert tracker.get_remaining_uses("search") == 3
    assert callable(JsonFileStore)


def test_subscription_imports():
    """Test that subscription modules can be imported."""
    from app.subscription.models import PLAN_LIMITS, SubscriptionTier
    from app.subscription.gates import FeatureGates
    from app.subscription.services import SubscriptionService

    assert set(PLAN_LIMITS) == set(SubscriptionTier)
    assert callable(FeatureGates)
    assert callable(SubscriptionService)


def test_restaurant_service_imports():
    """Test that restaurant_service modules can be imported."""
    from restaurant_service import (
        Restaurant,
        sort_restaurants,
        filter_restaurants_by_tags,
        setup_logging,
    )

    restaurant = Restaurant(id="r1", name="Noodle Bar")
    assert restaurant.price_level is None
    assert restaurant.dietary_options == []
    assert callable(sort_restaurants)
    assert callable(filter_restaurants_by_tags)
    assert callable(setup_logging)


def test_search_throttle_imports():
    from app.search_throttle import SearchThrottle, ThrottleConfig

    throttle = SearchThrottle(ThrottleConfig())
    assert throttle.get_remaining_requests() == 10
