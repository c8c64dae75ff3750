# backend/vendordb/__init__.py
import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # app.logger is the "vendordb" logger; service module loggers propagate to it
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Change log interceptors register on import
    from .services import audit_service  # noqa: F401

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
