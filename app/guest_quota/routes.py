"""
Guest quota routes.

JSON endpoints the frontend calls around each gated action: ``check``
before the backend call, ``register`` after it succeeded.
"""

from flask import Blueprint, jsonify, make_response

from .models import GuestFeature
from .notifications import NotificationQueue
from .service import GuestQuotaService, GUEST_COOKIE

COOKIE_MAX_AGE = 60 * 60 * 24 * 365 * 3  # 3-year cookie


def create_guest_quota_blueprint(guest_quota_service: GuestQuotaService) -> Blueprint:
    """Create guest quota blueprint with routes.

    Args:
        guest_quota_service: Service resolving visitors and their trackers

    Returns:
        Flask blueprint with guest quota routes
    """
    blueprint = Blueprint('guest_quota', __name__, url_prefix='/api/guest')

    def respond(payload: dict, visitor_id: str, is_new: bool, status: int = 200):
        resp = make_response(jsonify(payload), status)
        if is_new:
            resp.set_cookie(GUEST_COOKIE, visitor_id, max_age=COOKIE_MAX_AGE)
        return resp

    def unknown_feature(feature: str):
        return jsonify({"error": "unknown-feature", "feature": feature}), 404

    @blueprint.route('/usage', methods=['GET'])
    def get_all_usage():
        """Usage snapshot for every gated feature."""
        if guest_quota_service.is_signed_in():
            return jsonify({"guest": False, "usage": {}})

        visitor_id, is_new = guest_quota_service.get_visitor_id()
        tracker = guest_quota_service.tracker_for(visitor_id)
        usage = tracker.get_all_usage()
        return respond({
            "guest": True,
            "usage": {f.value: u.to_dict() for f, u in usage.items()},
        }, visitor_id, is_new)

    @blueprint.route('/usage/<feature>', methods=['GET'])
    def get_feature_usage(feature):
        """Remaining uses for one feature."""
        if not GuestFeature.is_valid(feature):
            return unknown_feature(feature)

        if guest_quota_service.is_signed_in():
            return jsonify({"feature": feature, "guest": False, "has_free_tries": True})

        visitor_id, is_new = guest_quota_service.get_visitor_id()
        tracker = guest_quota_service.tracker_for(visitor_id)
        return respond({
            "feature": feature,
            "guest": True,
            "remaining": tracker.get_remaining_uses(feature),
            "has_free_tries": tracker.has_free_tries_for(feature),
        }, visitor_id, is_new)

    @blueprint.route('/usage/<feature>/check', methods=['POST'])
    def check_access(feature):
        """Check access before a gated action. Does not consume quota."""
        if not GuestFeature.is_valid(feature):
            return unknown_feature(feature)

        if guest_quota_service.is_signed_in():
            return jsonify({"allowed": True, "guest": False, "feature": feature})

        visitor_id, is_new = guest_quota_service.get_visitor_id()
        notifications = NotificationQueue()
        tracker = guest_quota_service.tracker_for(visitor_id, notifier=notifications)
        allowed = tracker.check_feature_access(feature)

        return respond({
            "allowed": allowed,
            "guest": True,
            "feature": feature,
            "remaining": tracker.get_remaining_uses(feature),
            "notifications": [n.to_dict() for n in notifications.drain()],
        }, visitor_id, is_new)

    @blueprint.route('/usage/<feature>/register', methods=['POST'])
    def register_usage(feature):
        """Count a use after the gated action succeeded."""
        if not GuestFeature.is_valid(feature):
            return unknown_feature(feature)

        if guest_quota_service.is_signed_in():
            return jsonify({"status": "ok", "guest": False, "feature": feature})

        visitor_id, is_new = guest_quota_service.get_visitor_id()
        notifications = NotificationQueue()
        tracker = guest_quota_service.tracker_for(visitor_id, notifier=notifications)
        if not guest_quota_service.register_within_limit(tracker, feature):
            tracker.check_feature_access(feature)
            return respond({
                "status": "limit-reached",
                "allowed": False,
                "guest": True,
                "feature": feature,
                "remaining": 0,
                "notifications": [n.to_dict() for n in notifications.drain()],
            }, visitor_id, is_new)

        return respond({
            "status": "ok",
            "allowed": True,
            "guest": True,
            "feature": feature,
            "remaining": tracker.get_remaining_uses(feature),
        }, visitor_id, is_new)

    return blueprint
