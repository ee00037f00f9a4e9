from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from snaptrade.config import Settings, get_settings
from snaptrade.database.session import create_engine_from_settings, get_session_maker
from webapp.routes import register_blueprints
from webapp.utils import error

logger = logging.getLogger(__name__)

# Base64 chart screenshots arrive inline in the JSON body.
MAX_CONTENT_LENGTH = 16 * 1024 * 1024


def create_app(settings: Settings | None = None) -> Flask:
    """
    Flask application factory.
    """

    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    app = Flask(__name__)
    app.url_map.strict_slashes = False

    engine = create_engine_from_settings(settings)
    session_maker = get_session_maker(engine)

    app.config.update(
        ENGINE=engine,
        SESSION_MAKER=session_maker,
        SETTINGS=settings,
        MAX_CONTENT_LENGTH=MAX_CONTENT_LENGTH,
    )

    register_blueprints(app)
    _register_error_handlers(app)

    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _unhandled_error(exc: Exception):
        logger.exception("Unhandled error")
        return error("An unknown error occurred", 500)
