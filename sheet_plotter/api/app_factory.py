"""Flask application factory."""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from redis import Redis
from rq import Queue

from ..config import APP_CONFIG, QUEUE_CONFIG
from ..core import EmptyExport, EmptyHistory, ParseFault, ProcessingError, ValidationFault
from .routes import api_bp
from .sessions import SessionStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationFault: 400,
    ParseFault: 400,
    EmptyHistory: 409,
    EmptyExport: 422,
}


def create_app(*, queue: Queue | None = None) -> Flask:
    """Create and configure the Flask application.

    ``queue`` replaces the Redis-backed export queue, mostly for tests.
    """

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = APP_CONFIG.max_upload_bytes

    CORS(app)
    app.register_blueprint(api_bp, url_prefix="/api")

    if queue is None:
        redis_connection = Redis.from_url(QUEUE_CONFIG.redis_url)
        queue = Queue(
            name=QUEUE_CONFIG.queue_name,
            connection=redis_connection,
            default_timeout=QUEUE_CONFIG.default_timeout,
        )
    app.extensions["rq"] = {"queue": queue, "connection": queue.connection}
    app.extensions["sessions"] = SessionStore(
        max_sessions=APP_CONFIG.max_sessions,
        idle_seconds=APP_CONFIG.session_idle_minutes * 60,
    )

    @app.errorhandler(ProcessingError)
    def handle_processing_error(exc: ProcessingError):
        status = ERROR_STATUS.get(type(exc), 500)
        logger.warning("Request failed with %s: %s", type(exc).__name__, exc)
        return jsonify(exc.as_dict()), status

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    logger.info("Flask application initialised")
    return app
