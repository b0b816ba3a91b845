"""
Search throttle routes.
"""

from flask import Blueprint, jsonify

from .services import SearchThrottleService


def create_search_throttle_blueprint(throttle_service: SearchThrottleService) -> Blueprint:
    """Create search throttle blueprint with routes."""
    bp = Blueprint('search_throttle', __name__, url_prefix='/api/search')

    @bp.route("/throttle", methods=["POST"])
    def check_throttle():
        """Record a search attempt; 429 when throttled."""
        throttle = throttle_service.get_throttle(throttle_service.get_caller_key())
        result = throttle.check_throttle()
        return jsonify(result.to_dict()), (200 if result.allowed else 429)

    @bp.route("/throttle", methods=["GET"])
    def throttle_status():
        throttle = throttle_service.get_throttle(throttle_service.get_caller_key())
        return jsonify({
            "blocked": throttle.is_blocked,
            "remaining": throttle.get_remaining_requests(),
            "seconds_until_reset": throttle.get_time_until_reset(),
        })

    return bp
