#!/usr/bin/env python3
"""
Usage data management script:
- inspect or reset a guest visitor's daily free-use counters
- inspect a signed-in user's feature-gate usage
- list visitors with stored guest usage
"""

import json
import argparse
import logging
from pathlib import Path

from app.guest_quota.models import GuestQuotaSettings
from app.guest_quota.storage import JsonFileStore
from app.guest_quota.tracker import GuestUsageTracker, STORAGE_PREFIX
from app.subscription.gates import FeatureGates
from app.subscription.services import SubscriptionService, ConfiguredStatusFetcher
from config_manager import ConfigManager

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class UsageDataManager:
    """Reads and resets stored usage for support requests."""

    def __init__(self, data_dir: Path, config_manager: ConfigManager):
        self.data_dir = data_dir
        guest_config = config_manager.get_guest_quota_config()
        sub_config = config_manager.get_subscription_config()

        self.guest_store = JsonFileStore(data_dir / "guest_usage.json")
        self.guest_settings = GuestQuotaSettings(
            daily_limit=guest_config.daily_limit,
            feature_limits=guest_config.feature_limits,
            signup_path=guest_config.signup_path,
        )
        self.subscription_service = SubscriptionService(
            ConfiguredStatusFetcher(sub_config.pro_users, sub_config.premium_users)
        )

    def _tracker(self, visitor_id: str) -> GuestUsageTracker:
        return GuestUsageTracker(
            store=self.guest_store,
            settings=self.guest_settings,
            namespace=f"{STORAGE_PREFIX}:{visitor_id}",
        )

    def list_visitors(self) -> list[str]:
        prefix = f"{STORAGE_PREFIX}:"
        return [key[len(prefix):] for key in self.guest_store.keys() if key.startswith(prefix)]

    def show_guest(self, visitor_id: str) -> dict:
        usage = self._tracker(visitor_id).get_all_usage()
        return {feature.value: u.to_dict() for feature, u in usage.items()}

    def reset_guest(self, visitor_id: str) -> None:
        self._tracker(visitor_id).reset()
        logger.info(f"Reset guest usage for {visitor_id}")

    def show_user(self, uid: str) -> dict:
        gates = FeatureGates(self.subscription_service, self.data_dir / "feature_usage.json")
        return gates.get_usage_stats(uid)


def main():
    parser = argparse.ArgumentParser(description="Usage data management script")
    parser.add_argument("--data-dir", type=Path, default=None,
                       help="Directory containing usage data files (defaults to configured data dir)")
    parser.add_argument("--config", default="dishfinder_config.json",
                       help="Configuration file")
    parser.add_argument("--list", action="store_true",
                       help="List visitors with stored guest usage")
    parser.add_argument("--show", metavar="VISITOR",
                       help="Show a guest visitor's usage for today")
    parser.add_argument("--reset", metavar="VISITOR",
                       help="Reset a guest visitor's usage")
    parser.add_argument("--user", metavar="UID",
                       help="Show a signed-in user's feature-gate usage")

    args = parser.parse_args()

    config_manager = ConfigManager(args.config)
    data_dir = args.data_dir or Path(config_manager.get_paths_config().data_dir)
    manager = UsageDataManager(data_dir, config_manager)

    if args.list:
        print(json.dumps(manager.list_visitors(), indent=2))
    elif args.show:
        print(json.dumps(manager.show_guest(args.show), indent=2))
    elif args.reset:
        manager.reset_guest(args.reset)
    elif args.user:
        print(json.dumps(manager.show_user(args.user), indent=2))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
