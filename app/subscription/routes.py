"""
Subscription and feature-gate routes for signed-in users.
"""

from flask import Blueprint, request, jsonify

from .gates import FeatureGates
from .models import PLAN_LIMITS
from .services import SubscriptionService


def create_subscription_blueprint(
    subscription_service: SubscriptionService,
    feature_gates: FeatureGates,
) -> Blueprint:
    """Create subscription blueprint with routes."""
    bp = Blueprint('subscription', __name__, url_prefix='/api/subscription')

    def require_uid():
        uid = request.cookies.get("uid")
        if not uid:
            return None, (jsonify({"error": "no-uid"}), 401)
        return uid, None

    @bp.route("", methods=["GET"])
    def get_subscription():
        """Current plan and its limits."""
        uid, error = require_uid()
        if error:
            return error

        force = request.args.get("refresh", "").lower() == "true"
        status = subscription_service.get_status(uid, force_refresh=force)
        return jsonify({
            "status": status.to_dict(),
            "limits": PLAN_LIMITS[status.subscription_tier].to_dict(),
        })

    @bp.route("/usage", methods=["GET"])
    def get_usage():
        uid, error = require_uid()
        if error:
            return error

        return jsonify({
            "stats": feature_gates.get_usage_stats(uid),
            "gates": {
                "scrape": feature_gates.can_scrape_restaurant(uid),
                "save": feature_gates.can_save_restaurant(uid),
                "tags": feature_gates.can_create_tag(uid),
                "comparison": feature_gates.can_use_comparison(uid),
                "feedback": feature_gates.can_send_feedback(uid),
                "over_saved_limit": feature_gates.is_over_saved_restaurant_limit(uid),
            },
        })

    @bp.route("/usage/scrape", methods=["POST"])
    def scrape():
        uid, error = require_uid()
        if error:
            return error
        return jsonify(feature_gates.increment_restaurant_scrape(uid).to_dict())

    @bp.route("/usage/scrape/refund", methods=["POST"])
    def refund_scrape():
        uid, error = require_uid()
        if error:
            return error
        feature_gates.decrement_restaurant_scrape(uid)
        return jsonify({"status": "ok"})

    @bp.route("/usage/save", methods=["POST"])
    def save_restaurant():
        uid, error = require_uid()
        if error:
            return error
        return jsonify(feature_gates.increment_saved_restaurant(uid).to_dict())

    @bp.route("/usage/unsave", methods=["POST"])
    def unsave_restaurant():
        uid, error = require_uid()
        if error:
            return error
        feature_gates.decrement_saved_restaurant(uid)
        return jsonify({"status": "ok"})

    @bp.route("/usage/tag", methods=["POST"])
    def create_tag():
        uid, error = require_uid()
        if error:
            return error
        return jsonify(feature_gates.increment_tag(uid).to_dict())

    @bp.route("/usage/untag", methods=["POST"])
    def delete_tag():
        uid, error = require_uid()
        if error:
            return error
        feature_gates.decrement_tag(uid)
        return jsonify({"status": "ok"})

    @bp.route("/usage/feedback", methods=["POST"])
    def feedback():
        uid, error = require_uid()
        if error:
            return error
        return jsonify(feature_gates.increment_feedback_request(uid).to_dict())

    return bp
