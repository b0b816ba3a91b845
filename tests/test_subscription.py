"""
Tests for subscription plans, status caching and feature gates.
"""

import shutil
import threading
import tempfile
from datetime import date, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests
from flask import Flask

from app.subscription.factory import create_subscription_module
from app.subscription.gates import FeatureGates
from app.subscription.models import (
    PLAN_LIMITS,
    SubscriptionStatus,
    SubscriptionTier,
    normalize_subscription_tier,
)
from app.subscription.services import (
    ConfiguredStatusFetcher,
    RemoteStatusFetcher,
    SubscriptionService,
)


class TestTierNormalization:

    @pytest.mark.parametrize("label,expected", [
        ("premium", SubscriptionTier.PREMIUM),
        (" Enterprise ", SubscriptionTier.PREMIUM),
        ("PLUS", SubscriptionTier.PREMIUM),
        ("ultimate", SubscriptionTier.PREMIUM),
        ("pro", SubscriptionTier.PRO),
        ("Professional", SubscriptionTier.PRO),
        ("basic", SubscriptionTier.PRO),
        ("starter", SubscriptionTier.PRO),
        ("standard", SubscriptionTier.PRO),
        ("free", SubscriptionTier.FREE),
        ("", SubscriptionTier.FREE),
        (None, SubscriptionTier.FREE),
        ("gold", SubscriptionTier.FREE),
    ])
    def test_normalize(self, label, expected):
        assert normalize_subscription_tier(label) == expected

    def test_status_from_response(self):
        status = SubscriptionStatus.from_response(
            {"subscribed": True, "plan": "Plus", "subscription_end": "2027-01-01T00:00:00Z"}
        )
        assert status.subscription_tier == SubscriptionTier.PREMIUM
        assert status.subscription_end == "2027-01-01T00:00:00Z"

    def test_unsubscribed_response_is_free(self):
        status = SubscriptionStatus.from_response({"subscribed": False, "subscription_tier": "premium"})
        assert status.subscription_tier == SubscriptionTier.FREE
        assert status.subscribed is False

    def test_plan_limits(self):
        assert PLAN_LIMITS[SubscriptionTier.FREE].daily_restaurant_scrapes == 5
        assert PLAN_LIMITS[SubscriptionTier.PRO].max_saved_restaurants == 20
        assert PLAN_LIMITS[SubscriptionTier.PREMIUM].daily_restaurant_scrapes == -1
        assert PLAN_LIMITS[SubscriptionTier.PREMIUM].can_create_tags
        assert not PLAN_LIMITS[SubscriptionTier.PRO].can_create_tags


class TestSubscriptionService:

    def setup_method(self):
        self.now = 1000.0
        self.fetcher = MagicMock()
        self.fetcher.fetch.return_value = SubscriptionStatus(
            subscribed=True, subscription_tier=SubscriptionTier.PRO
        )
        self.service = SubscriptionService(self.fetcher, cache_seconds=300, clock=lambda: self.now)

    def test_anonymous_is_free(self):
        assert self.service.get_status(None).subscription_tier == SubscriptionTier.FREE
        self.fetcher.fetch.assert_not_called()

    def test_status_is_cached(self):
        self.service.get_status("alice")
        self.now += 299
        self.service.get_status("alice")
        assert self.fetcher.fetch.call_count == 1

        self.now += 2
        self.service.get_status("alice")
        assert self.fetcher.fetch.call_count == 2

    def test_force_refresh_bypasses_cache(self):
        self.service.get_status("alice")
        self.service.get_status("alice", force_refresh=True)
        assert self.fetcher.fetch.call_count == 2

    def test_error_falls_back_to_cache(self):
        self.service.get_status("alice")
        self.now += 600
        self.fetcher.fetch.side_effect = RuntimeError("edge function down")
        assert self.service.get_tier("alice") == SubscriptionTier.PRO

    def test_forced_refresh_error_is_free(self):
        self.service.get_status("alice")
        self.fetcher.fetch.side_effect = RuntimeError("edge function down")
        status = self.service.get_status("alice", force_refresh=True)
        assert status.subscription_tier == SubscriptionTier.FREE

    def test_stale_entries_are_evicted(self):
        self.service.get_status("alice")
        self.now += 24 * 60 * 60
        self.service.get_status("bob")

        assert set(self.service._cache) == {"bob"}
        self.fetcher.fetch.side_effect = RuntimeError("edge function down")
        assert self.service.get_tier("alice") == SubscriptionTier.FREE

    def test_error_without_cache_is_free(self):
        self.fetcher.fetch.side_effect = RuntimeError("edge function down")
        assert self.service.get_tier("bob") == SubscriptionTier.FREE

    def test_configured_fetcher(self):
        fetcher = ConfiguredStatusFetcher(pro_users=["p"], premium_users=["x"])
        assert fetcher.fetch("x").subscription_tier == SubscriptionTier.PREMIUM
        assert fetcher.fetch("p").subscription_tier == SubscriptionTier.PRO
        assert fetcher.fetch("someone").subscription_tier == SubscriptionTier.FREE


class TestRemoteStatusFetcher:

    def test_fetch_parses_response(self):
        session = MagicMock()
        session.post.return_value.json.return_value = {"subscribed": True, "tier": "premium"}
        fetcher = RemoteStatusFetcher("https://backend.example/check-subscription", timeout=5, session=session)

        status = fetcher.fetch("alice")

        assert status.subscription_tier == SubscriptionTier.PREMIUM
        session.post.assert_called_once_with(
            "https://backend.example/check-subscription", json={"user_id": "alice"}, timeout=5
        )

    def test_http_error_propagates(self):
        session = MagicMock()
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        fetcher = RemoteStatusFetcher("https://backend.example/check-subscription", session=session)

        with pytest.raises(requests.HTTPError):
            fetcher.fetch("alice")


class TestFeatureGates:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.today = date(2026, 10, 19)
        self.fetcher = ConfiguredStatusFetcher(pro_users=["pro_user"], premium_users=["premium_user"])
        self.service = SubscriptionService(self.fetcher)
        self.gates = FeatureGates(
            subscription_service=self.service,
            usage_file=self.temp_dir / "feature_usage.json",
            today=lambda: self.today,
        )

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_usage_file_created(self):
        assert (self.temp_dir / "feature_usage.json").exists()

    def test_free_scrape_limit(self):
        for _ in range(5):
            assert self.gates.increment_restaurant_scrape("free_user").allowed

        result = self.gates.increment_restaurant_scrape("free_user")
        assert not result.allowed
        assert result.message == "Daily scraping limit reached (5). Upgrade to Pro for more!"

    def test_pro_scrape_limit_message(self):
        for _ in range(15):
            assert self.gates.increment_restaurant_scrape("pro_user").allowed
        result = self.gates.increment_restaurant_scrape("pro_user")
        assert result.message == "Daily scraping limit reached (15). Upgrade to Premium for unlimited scrapes!"

    def test_premium_is_unlimited(self):
        for _ in range(50):
            assert self.gates.increment_restaurant_scrape("premium_user").allowed
        assert self.gates.can_save_restaurant("premium_user")
        assert self.gates.can_create_tag("premium_user")

    def test_scrapes_reset_next_utc_day(self):
        for _ in range(5):
            self.gates.increment_restaurant_scrape("free_user")
        assert not self.gates.can_scrape_restaurant("free_user")

        self.today = self.today + timedelta(days=1)
        assert self.gates.can_scrape_restaurant("free_user")
        assert self.gates.get_daily_usage("free_user").restaurant_scrapes == 0

    def test_scrape_refund(self):
        self.gates.increment_restaurant_scrape("free_user")
        self.gates.decrement_restaurant_scrape("free_user")
        self.gates.decrement_restaurant_scrape("free_user")
        assert self.gates.get_daily_usage("free_user").restaurant_scrapes == 0

    def test_saved_restaurant_limit(self):
        for _ in range(5):
            assert self.gates.increment_saved_restaurant("free_user").allowed
        result = self.gates.increment_saved_restaurant("free_user")
        assert not result.allowed
        assert result.message == "Saved restaurants limit reached (5). Upgrade to Pro for more saves!"

        self.gates.decrement_saved_restaurant("free_user")
        assert self.gates.can_save_restaurant("free_user")

    def test_downgrade_blocks_until_under_limit(self):
        self.fetcher.pro_users.add("downgraded")
        for _ in range(7):
            self.gates.increment_saved_restaurant("downgraded")

        self.fetcher.pro_users.discard("downgraded")
        self.service.invalidate("downgraded")

        assert self.gates.is_over_saved_restaurant_limit("downgraded")
        result = self.gates.increment_restaurant_scrape("downgraded")
        assert not result.allowed
        assert "exceeded your plan's limit of 5 saved restaurants" in result.message

    def test_feedback_limit(self):
        for _ in range(3):
            assert self.gates.increment_feedback_request("free_user").allowed
        result = self.gates.increment_feedback_request("free_user")
        assert not result.allowed
        assert result.message == "Daily feedback limit reached (3 per day). Try again tomorrow!"

    def test_plan_feature_flags(self):
        assert not self.gates.can_use_comparison("free_user")
        assert self.gates.can_use_comparison("pro_user")
        assert not self.gates.can_create_tag("pro_user")

    def test_concurrent_scrapes_respect_limit(self):
        for _ in range(4):
            self.gates.increment_restaurant_scrape("free_user")

        results = []
        barrier = threading.Barrier(8)

        def scrape():
            barrier.wait()
            results.append(self.gates.increment_restaurant_scrape("free_user").allowed)

        threads = [threading.Thread(target=scrape) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert self.gates.get_daily_usage("free_user").restaurant_scrapes == 5

    def test_concurrent_saves_respect_limit(self):
        results = []

        def save():
            results.append(self.gates.increment_saved_restaurant("pro_user").allowed)

        threads = [threading.Thread(target=save) for _ in range(30)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 20
        assert self.gates.get_user_totals("pro_user").saved_restaurants_count == 20

    def test_tag_counter(self):
        denied = self.gates.increment_tag("pro_user")
        assert not denied.allowed
        assert denied.message == "Custom tags are available on the Premium plan."

        assert self.gates.increment_tag("premium_user").allowed
        assert self.gates.increment_tag("premium_user").allowed
        self.gates.decrement_tag("premium_user")
        self.gates.decrement_tag("premium_user")
        self.gates.decrement_tag("premium_user")
        assert self.gates.get_usage_stats("premium_user")["tags_used"] == 0

    def test_usage_stats(self):
        self.gates.increment_restaurant_scrape("pro_user")
        self.gates.increment_saved_restaurant("pro_user")
        assert self.gates.get_usage_stats("pro_user") == {
            "daily_scrapes_used": 1,
            "daily_scrapes_limit": 15,
            "saved_restaurants_used": 1,
            "saved_restaurants_limit": 20,
            "tags_used": 0,
            "plan_name": "pro",
        }

    def test_corrupt_usage_file_counts_as_empty(self):
        (self.temp_dir / "feature_usage.json").write_text("not json", encoding="utf-8")
        assert self.gates.can_scrape_restaurant("free_user")
        assert self.gates.increment_restaurant_scrape("free_user").allowed


class TestSubscriptionRoutes:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        module = create_subscription_module(data_dir=self.temp_dir, premium_users=["vip"])
        app = Flask(__name__)
        app.register_blueprint(module["blueprint"])
        self.client = app.test_client()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_requires_uid(self):
        for method, path in [
            ("get", "/api/subscription"),
            ("get", "/api/subscription/usage"),
            ("post", "/api/subscription/usage/scrape"),
        ]:
            response = getattr(self.client, method)(path)
            assert response.status_code == 401
            assert response.get_json() == {"error": "no-uid"}

    def test_subscription_status(self):
        self.client.set_cookie("uid", "vip")
        data = self.client.get("/api/subscription").get_json()
        assert data["status"]["subscription_tier"] == "premium"
        assert data["limits"]["ai_analysis"] is True

    def test_usage_actions(self):
        self.client.set_cookie("uid", "alice")
        assert self.client.post("/api/subscription/usage/scrape").get_json() == {"allowed": True, "message": None}
        assert self.client.post("/api/subscription/usage/save").get_json()["allowed"] is True
        assert self.client.post("/api/subscription/usage/feedback").get_json()["allowed"] is True

        usage = self.client.get("/api/subscription/usage").get_json()
        assert usage["stats"]["daily_scrapes_used"] == 1
        assert usage["stats"]["saved_restaurants_used"] == 1
        assert usage["gates"]["comparison"] is False

        self.client.post("/api/subscription/usage/scrape/refund")
        self.client.post("/api/subscription/usage/unsave")
        usage = self.client.get("/api/subscription/usage").get_json()
        assert usage["stats"]["daily_scrapes_used"] == 0
        assert usage["stats"]["saved_restaurants_used"] == 0

    def test_tag_actions(self):
        self.client.set_cookie("uid", "vip")
        assert self.client.post("/api/subscription/usage/tag").get_json()["allowed"] is True
        assert self.client.get("/api/subscription/usage").get_json()["stats"]["tags_used"] == 1

        self.client.post("/api/subscription/usage/untag")
        assert self.client.get("/api/subscription/usage").get_json()["stats"]["tags_used"] == 0

        self.client.set_cookie("uid", "alice")
        assert self.client.post("/api/subscription/usage/tag").get_json()["allowed"] is False
