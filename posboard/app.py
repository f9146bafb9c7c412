"""Application factory for the posboard service."""

from __future__ import annotations

import atexit
import logging

from typing import Any, Mapping, Optional, Union

from flask import Flask

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("posboard")

from .config import Config
from .routes.dashboard import bp as dashboard_bp
from .services.api_client import AnalyticsClient
from .services.live_orders import LiveOrdersFeed


def create_app(
    config_object: Optional[Union[str, Mapping[str, Any], type]] = None,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(Config)

    if isinstance(config_object, Mapping):
        app.config.from_mapping(config_object)
    elif config_object is not None:
        app.config.from_object(config_object)

    logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    client = AnalyticsClient.from_config(app.config)
    app.extensions["api_client"] = client

    live_orders = None
    if app.config.get("LIVE_ORDERS_ENABLED"):
        live_orders = LiveOrdersFeed(
            client,
            poll_interval=app.config["POLL_INTERVAL_S"],
            debounce=app.config["DEBOUNCE_S"],
            page_size=app.config["ORDERS_PAGE_SIZE"],
        )
        live_orders.start()
        atexit.register(live_orders.close)
        logger.info("Live ready-orders feed started.")
    app.extensions["live_orders"] = live_orders

    app.register_blueprint(dashboard_bp)

    return app


__all__ = ["create_app"]
