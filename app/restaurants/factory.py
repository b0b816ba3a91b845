"""
Factory for creating the restaurants module.
"""

from .routes import create_restaurants_blueprint


def create_restaurants_module() -> dict:
    """Create restaurants module.

    Returns:
        Dictionary containing the blueprint
    """
    return {"blueprint": create_restaurants_blueprint()}
