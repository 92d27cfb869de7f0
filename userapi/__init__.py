import logging

from flask import Flask, request

from .config import settings
from .database import build_engine, build_session_factory
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

CORS_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
CORS_HEADERS = ['Content-Type', 'Authorization']


def create_app(test_config=None):
    app = Flask(__name__)

    app.config.from_mapping(
        DEBUG=settings.DEBUG,
        DATABASE_URL=settings.DATABASE_URL,
        CORS_ORIGINS=settings.CORS_ORIGINS,
    )

    if test_config:
        app.config.update(test_config)

    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)

    engine = build_engine(app.config["DATABASE_URL"], echo=settings.DEBUG and not app.config.get("TESTING"))
    SessionLocal = build_session_factory(engine)

    # attach to app for other modules to use
    app.extensions["db_engine"] = engine
    app.extensions["db_session_factory"] = SessionLocal

    _init_cors(app)

    from .routes import users_bp

    app.register_blueprint(users_bp)

    # helper to create DB tables based on SQLAlchemy models
    def init_db():
        try:
            from .models import Base

            Base.metadata.create_all(bind=engine)
        except Exception as e:
            logging.exception("init_db failed: %s", e)
            raise

    app.init_db = init_db

    return app


def _init_cors(app: Flask) -> None:
    """Allow cross-origin calls from the configured origins (``*`` by default)."""

    @app.after_request
    def add_cors_headers(response):
        origins = app.config.get("CORS_ORIGINS") or []
        origin = request.headers.get("Origin")
        if "*" in origins:
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        else:
            return response
        response.headers["Access-Control-Allow-Methods"] = ", ".join(CORS_METHODS)
        response.headers["Access-Control-Allow-Headers"] = ", ".join(CORS_HEADERS)
        return response
