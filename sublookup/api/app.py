# ruff: noqa: E402
import logging
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from sublookup.api.config import AppConfig, get_app_config
from sublookup.api.public_api import public_bp
from sublookup.api.search import search_bp
from sublookup.api.services import EXTENSION_KEY
from sublookup.api.session_routes import session_bp
from sublookup.core.errors import (
    NO_MATCH,
    ConfigurationError,
    LookupFailure,
)
from sublookup.core.manifest import manifest_for
from sublookup.core.query_engine import QueryEngine
from sublookup.core.repository import DataRepository

logger = logging.getLogger(__name__)


def _failure_status(exc: LookupFailure) -> int:
    return 404 if exc.code == NO_MATCH else 400


def create_app(
    config: AppConfig | None = None,
    repository: DataRepository | None = None,
) -> Flask:
    """Build the Flask app around one repository shared by every request."""

    config = config or get_app_config()
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    logging.getLogger().setLevel(config.log_level)

    if repository is None:
        repository = DataRepository(manifest_for(config.data_dir))
    engine = QueryEngine(
        repository,
        admin_role=config.admin_role,
        not_paid_threshold=config.not_paid_threshold,
        audit_excluded_bases=config.audit_excluded_bases,
    )

    app = Flask(__name__)
    app.secret_key = config.secret_key
    app.config.update(
        PERMANENT_SESSION_LIFETIME=timedelta(hours=config.session_hours),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=config.secure_cookies,
    )
    app.json.ensure_ascii = False
    if config.cors_origins:
        CORS(app, origins=config.cors_origins, supports_credentials=True)

    app.extensions[EXTENSION_KEY] = {
        "config": config,
        "repository": repository,
        "engine": engine,
    }

    app.register_blueprint(search_bp)
    app.register_blueprint(session_bp)
    app.register_blueprint(public_bp)

    @app.errorhandler(LookupFailure)
    def handle_lookup_failure(exc: LookupFailure):
        return jsonify({"error": exc.message, "code": exc.code}), _failure_status(exc)

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(exc: ConfigurationError):
        logger.error("configuration_error code=%s message=%s", exc.code, exc.message)
        return jsonify({"error": "Server configuration error.", "code": exc.code}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("api_error")
        return jsonify({"error": "Server error processing your request."}), 500

    return app


if __name__ == "__main__":  # pragma: no cover - manual execution
    debug_mode = os.environ.get("FLASK_DEBUG", "0") in ("1", "true", "True")
    port = int(os.environ.get("PORT", "9002"))
    create_app().run(host="0.0.0.0", port=port, debug=debug_mode)
