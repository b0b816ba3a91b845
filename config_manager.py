"""
Configuration management for the DishFinder usage service.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool


@dataclass
class GuestQuotaConfig:
    """Free daily uses for visitors who have not signed up."""
    daily_limit: int
    signup_path: str
    notification_duration_ms: int
    feature_limits: Dict[str, int] = field(default_factory=dict)


@dataclass
class SubscriptionConfig:
    """Subscription lookup settings."""
    pro_users: list[str]
    premium_users: list[str]
    cache_seconds: int
    check_url: str
    request_timeout: float


@dataclass
class SearchThrottleConfig:
    """Search rate limit settings."""
    max_requests: int
    window_seconds: int
    block_seconds: int


@dataclass
class PathsConfig:
    """Path configuration settings."""
    data_dir: str


def _split_ids(value: str) -> list[str]:
    return [uid.strip() for uid in value.split(",") if uid.strip()]


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "dishfinder_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 8080,
                "debug": False
            },
            "guest_quota": {
                "daily_limit": 3,
                "signup_path": "/auth",
                "notification_duration_ms": 5000,
                "feature_limits": {}
            },
            "subscription": {
                "pro_users": [],
                "premium_users": [],
                "cache_seconds": 300,
                "check_url": "",
                "request_timeout": 10.0
            },
            "search_throttle": {
                "max_requests": 10,
                "window_seconds": 24 * 60 * 60,
                "block_seconds": 60 * 60
            },
            "paths": {
                "data_dir": "data"
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        # Guest quota settings
        if os.getenv("GUEST_DAILY_LIMIT"):
            self._config["guest_quota"]["daily_limit"] = int(os.getenv("GUEST_DAILY_LIMIT"))

        if os.getenv("SIGNUP_PATH"):
            self._config["guest_quota"]["signup_path"] = os.getenv("SIGNUP_PATH")

        # Subscription settings
        if os.getenv("PRO_USER_IDS"):
            self._config["subscription"]["pro_users"] = _split_ids(os.getenv("PRO_USER_IDS"))

        if os.getenv("PREMIUM_USER_IDS"):
            self._config["subscription"]["premium_users"] = _split_ids(os.getenv("PREMIUM_USER_IDS"))

        if os.getenv("SUBSCRIPTION_CHECK_URL"):
            self._config["subscription"]["check_url"] = os.getenv("SUBSCRIPTION_CHECK_URL")

        # Search throttle settings
        if os.getenv("SEARCH_MAX_REQUESTS"):
            self._config["search_throttle"]["max_requests"] = int(os.getenv("SEARCH_MAX_REQUESTS"))

        if os.getenv("SEARCH_WINDOW_SECONDS"):
            self._config["search_throttle"]["window_seconds"] = int(os.getenv("SEARCH_WINDOW_SECONDS"))

        if os.getenv("SEARCH_BLOCK_SECONDS"):
            self._config["search_throttle"]["block_seconds"] = int(os.getenv("SEARCH_BLOCK_SECONDS"))

        # Paths
        if os.getenv("DATA_DIR"):
            self._config["paths"]["data_dir"] = os.getenv("DATA_DIR")

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"]
        )

    def get_guest_quota_config(self) -> GuestQuotaConfig:
        """Get guest quota configuration."""
        gq_config = self._config["guest_quota"]
        return GuestQuotaConfig(
            daily_limit=gq_config["daily_limit"],
            signup_path=gq_config["signup_path"],
            notification_duration_ms=gq_config["notification_duration_ms"],
            feature_limits=dict(gq_config.get("feature_limits") or {})
        )

    def get_subscription_config(self) -> SubscriptionConfig:
        """Get subscription configuration."""
        sub_config = self._config["subscription"]
        return SubscriptionConfig(
            pro_users=list(sub_config["pro_users"]),
            premium_users=list(sub_config["premium_users"]),
            cache_seconds=sub_config["cache_seconds"],
            check_url=sub_config["check_url"],
            request_timeout=sub_config["request_timeout"]
        )

    def get_search_throttle_config(self) -> SearchThrottleConfig:
        """Get search throttle configuration."""
        st_config = self._config["search_throttle"]
        return SearchThrottleConfig(
            max_requests=st_config["max_requests"],
            window_seconds=st_config["window_seconds"],
            block_seconds=st_config["block_seconds"]
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        return PathsConfig(data_dir=self._config["paths"]["data_dir"])

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_guest_quota_config() -> GuestQuotaConfig:
    """Get guest quota configuration."""
    return config_manager.get_guest_quota_config()


def get_subscription_config() -> SubscriptionConfig:
    """Get subscription configuration."""
    return config_manager.get_subscription_config()


def get_search_throttle_config() -> SearchThrottleConfig:
    """Get search throttle configuration."""
    return config_manager.get_search_throttle_config()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
