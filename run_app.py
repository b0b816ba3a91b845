#!/usr/bin/env python3
"""
Runner script for the Flask application.
Sets up logging, then serves the app on the configured host and port.
"""

import sys
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from config_manager import get_app_config
from restaurant_service.logging_config import setup_logging, stop_logging, get_logger


def main() -> None:
    app_config = get_app_config()
    setup_logging(debug=app_config.debug)
    logger = get_logger(__name__)

    # Import after logging is configured so module loggers pick it up
    from app.main import create_app
    app = create_app()

    logger.info(f"Starting DishFinder usage service on {app_config.host}:{app_config.port}")
    try:
        app.run(
            host=app_config.host,
            port=app_config.port,
            debug=app_config.debug
        )
    finally:
        stop_logging()


if __name__ == "__main__":
    main()
