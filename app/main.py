from pathlib import Path
from typing import Optional

# Import configuration management
import sys
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from app.guest_quota.factory import create_guest_quota_module
from app.subscription.factory import create_subscription_module
from app.search_throttle.factory import create_search_throttle_module
from app.restaurants.factory import create_restaurants_module


def create_app(config_manager: Optional[ConfigManager] = None, data_dir: Optional[Path] = None) -> Flask:
    """Build the Flask application and register every module's blueprint.

    Args:
        config_manager: Configuration source; defaults to dishfinder_config.json + env
        data_dir: Overrides the configured data directory
    """
    config_manager = config_manager or ConfigManager()
    paths_config = config_manager.get_paths_config()
    guest_config = config_manager.get_guest_quota_config()
    subscription_config = config_manager.get_subscription_config()
    throttle_config = config_manager.get_search_throttle_config()

    if data_dir is None:
        data_dir = Path(__file__).parent.parent / paths_config.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    flask_app = Flask(__name__)
    flask_app.wsgi_app = ProxyFix(
        flask_app.wsgi_app,
        x_for=1,       # trust 1 hop for X-Forwarded-For
        x_proto=1,     # trust 1 hop for X-Forwarded-Proto
        x_host=1,      # trust 1 hop for X-Forwarded-Host
        x_prefix=1)

    guest_quota_module = create_guest_quota_module(
        data_dir=data_dir,
        daily_limit=guest_config.daily_limit,
        feature_limits=guest_config.feature_limits,
        signup_path=guest_config.signup_path,
        notification_duration_ms=guest_config.notification_duration_ms
    )

    subscription_module = create_subscription_module(
        data_dir=data_dir,
        pro_users=subscription_config.pro_users,
        premium_users=subscription_config.premium_users,
        cache_seconds=subscription_config.cache_seconds,
        check_url=subscription_config.check_url,
        request_timeout=subscription_config.request_timeout
    )

    search_throttle_module = create_search_throttle_module(
        max_requests=throttle_config.max_requests,
        window_seconds=throttle_config.window_seconds,
        block_seconds=throttle_config.block_seconds
    )

    restaurants_module = create_restaurants_module()

    # Register blueprints
    flask_app.register_blueprint(guest_quota_module["blueprint"])
    flask_app.register_blueprint(subscription_module["blueprint"])
    flask_app.register_blueprint(search_throttle_module["blueprint"])
    flask_app.register_blueprint(restaurants_module["blueprint"])

    flask_app.extensions["dishfinder"] = {
        "guest_quota": guest_quota_module,
        "subscription": subscription_module,
        "search_throttle": search_throttle_module,
    }

    @flask_app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    return flask_app
