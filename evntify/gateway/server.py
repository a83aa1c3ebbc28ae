"""
API gateway: combines the auth and events blueprints.
This is the local entrypoint for development.
"""

import logging
from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from evntify.auth_service.routes import auth_bp
from evntify.config import Config
from evntify.database.db_connection import STORE_EXTENSION_KEY, create_store
from evntify.database.store import Store
from evntify.errors import register_error_handlers
from evntify.events_service.routes import events_bp

LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"


def create_app(test_config: Optional[Mapping[str, Any]] = None, store: Optional[Store] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        test_config (dict, optional): Overrides for values from Config.
        store (Store, optional): Use this store instead of building one from config.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET is missing. Set it in .env")

    # Basic console logging during API requests
    logging.basicConfig(level=app.config["LOG_LEVEL"], format=LOG_FORMAT)

    CORS(app, resources={
        r"/api/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    app.extensions[STORE_EXTENSION_KEY] = store if store is not None else create_store(app.config)

    register_error_handlers(app)

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    logging.info("All blueprints registered successfully.")

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


def main() -> None:
    app = create_app()
    try:
        app.run(host="0.0.0.0", port=app.config["GATEWAY_PORT"], debug=app.config.get("DEBUG", False))
    finally:
        app.extensions[STORE_EXTENSION_KEY].close()


if __name__ == "__main__":
    main()
