"""
Restaurant list routes.
"""

from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from restaurant_service.models import Restaurant, RestaurantTag
from restaurant_service.sorting import SortOption, sort_restaurants, sort_by_price_preference
from restaurant_service.tag_filter import filter_restaurants_by_tags, lookup_from_tags


def create_restaurants_blueprint() -> Blueprint:
    """Create restaurants blueprint with routes."""
    bp = Blueprint('restaurants', __name__, url_prefix='/api/restaurants')

    @bp.route("/arrange", methods=["POST"])
    def arrange():
        """Filter by tags, then order a result list.

        Body: {"restaurants": [...], "sort": "name-asc", "preferred_price": "$$",
               "tag_ids": [...], "tags": [{"restaurant_id", "tag_id"}, ...]}
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "No data provided"}), 400

        sort = data.get("sort")
        if sort is not None and SortOption.parse(sort) is None:
            return jsonify({"error": "unknown-sort", "sort": sort}), 400

        try:
            restaurants = [Restaurant(**item) for item in data.get("restaurants", [])]
            tags = [RestaurantTag(**item) for item in data.get("tags", [])]
        except (TypeError, ValidationError) as e:
            return jsonify({"error": "invalid-restaurants", "message": str(e)}), 400

        result = filter_restaurants_by_tags(restaurants, data.get("tag_ids") or [], lookup_from_tags(tags))
        result = sort_by_price_preference(result, data.get("preferred_price"))
        if sort is not None:
            result = sort_restaurants(result, sort)

        return jsonify({"restaurants": [r.model_dump() for r in result]})

    return bp
