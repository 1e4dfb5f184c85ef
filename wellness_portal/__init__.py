"""
Application factory for the wellness portal.

This module provides a function to create and configure the Flask
application. All extensions (SQLAlchemy, Migrate, JWT) are initialised
here. Individual blueprints for the assessment modules, the unified
profile, population routing, the content library and packets are
registered inside the factory to allow for modular development and unit
testing.

Environment variables control the database connection, the secret key
and the log level. In production set ``DATABASE_URL`` and
``JWT_SECRET_KEY``; a development default using SQLite is provided when
no database URL is available.
"""

from __future__ import annotations

import os
from datetime import timedelta

from flask import Flask
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

# instantiate extensions without binding them to an app yet.  They will
# be bound in create_app().
from .db import db  # use shared db object from db.py
migrate = Migrate()
jwt = JWTManager()


def create_app(test_config: dict | None = None) -> Flask:
    """Create and configure a Flask application.

    Parameters
    ----------
    test_config: dict | None, optional
        Optional configuration overrides used when running tests.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    app = Flask(__name__)

    # Default configuration. Override using environment variables or
    # by passing a ``test_config`` mapping.
    app.config.update(
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///wellness.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JWT_SECRET_KEY=os.environ.get("JWT_SECRET_KEY", "please-change-this-secret-key"),
        JWT_ACCESS_TOKEN_EXPIRES=timedelta(days=1),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )

    if test_config:
        app.config.update(test_config)

    from .logging_config import configure_logging
    configure_logging(app.config["LOG_LEVEL"])

    # Initialise extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # Register custom error handlers
    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints. Importing here avoids circular imports.
    from .routes.auth import auth_bp
    from .routes.clients import clients_bp
    from .routes.modules import modules_bp
    from .routes.profile import profile_bp
    from .routes.populations import populations_bp
    from .routes.library import library_bp
    from .routes.packets import packets_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(clients_bp, url_prefix="/api")
    app.register_blueprint(modules_bp, url_prefix="/api")
    app.register_blueprint(profile_bp, url_prefix="/api")
    app.register_blueprint(populations_bp, url_prefix="/api")
    app.register_blueprint(library_bp, url_prefix="/api")
    app.register_blueprint(packets_bp, url_prefix="/api")

    # Provide a simple health check route
    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response."""
        return {"status": "ok"}

    app.logger.debug("Application created with database %s", app.config["SQLALCHEMY_DATABASE_URI"])
    return app
