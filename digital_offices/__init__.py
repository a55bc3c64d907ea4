"""
Application factory for the Digital Offices marketplace API.

This module provides a function to create and configure the Flask
application. All extensions (SQLAlchemy, Migrate, JWT, CORS) are
initialised here. Individual blueprints for authentication, experts
and administration are registered inside the factory to allow for
modular development and unit testing.

Environment variables control the database connection, token secrets
and lifetimes, Google sign-in and email delivery. In production, set
at least ``DATABASE_URL``, ``JWT_SECRET_KEY`` and ``GOOGLE_CLIENT_ID``.
A default configuration is provided for development, using SQLite
when no database URL is available and logging emails to the console.
"""

from __future__ import annotations

import os
from datetime import timedelta

from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

# instantiate extensions without binding them to an app yet.  They will
# be bound in create_app().
from .db import db  # use shared db object from db.py
migrate = Migrate()
jwt = JWTManager()


def _seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.environ.get(name, default)))


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
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///digital_offices.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JWT_SECRET_KEY=os.environ.get("JWT_SECRET_KEY", "please-change-this-secret-key"),
        JWT_ACCESS_TOKEN_EXPIRES=_seconds("JWT_ACCESS_EXPIRES_IN", 3600),
        JWT_REFRESH_TOKEN_EXPIRES=_seconds("JWT_REFRESH_EXPIRES_IN", 604800),
        GOOGLE_CLIENT_ID=os.environ.get("GOOGLE_CLIENT_ID"),
        FRONTEND_URL=os.environ.get("FRONTEND_URL", "http://localhost:3001"),
        CORS_ORIGINS=os.environ.get("CORS_ORIGINS", "*"),
        EMAIL_PROVIDER=os.environ.get("EMAIL_PROVIDER", "console"),
        RESEND_API_KEY=os.environ.get("RESEND_API_KEY"),
        RESEND_FROM_EMAIL=os.environ.get("RESEND_FROM_EMAIL", "onboarding@resend.dev"),
        SES_FROM_EMAIL=os.environ.get("SES_FROM_EMAIL", "noreply@example.com"),
        AWS_REGION=os.environ.get("AWS_REGION", "us-east-1"),
        AWS_ACCESS_KEY_ID=os.environ.get("AWS_ACCESS_KEY_ID"),
        AWS_SECRET_ACCESS_KEY=os.environ.get("AWS_SECRET_ACCESS_KEY"),
    )

    if test_config:
        app.config.update(test_config)

    # Initialise extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    origins = app.config["CORS_ORIGINS"]
    CORS(app, resources={r"/api/*": {"origins": origins.split(",") if origins != "*" else "*"}})

    # Register custom error handlers
    from .errors import register_error_handlers, register_jwt_handlers
    register_error_handlers(app)
    register_jwt_handlers(jwt)

    # Register blueprints. Importing here avoids circular imports.
    from .routes.auth import auth_bp
    from .routes.experts import experts_bp
    from .routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(experts_bp, url_prefix="/api/experts")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # Provide a simple health check route
    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response.

        This endpoint can be used by deployment platforms to verify
        that the application has started correctly.
        """
        return {"status": "ok"}

    return app
