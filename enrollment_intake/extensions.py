# extensions.py
"""
Flask extensions initialization.
This file initializes all Flask extensions to avoid circular imports.
Extensions are initialized here and then bound to the app in the application factory.
"""

import logging

from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Initialize extensions without app binding
db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(key_func=get_remote_address)

logger = logging.getLogger(__name__)


def check_database_health():
    """
    Check if the database connection is healthy.
    This function requires an active Flask application context.

    Returns:
        tuple: (bool, str) indicating health status and message
    """
    try:
        connection = db.engine.connect()
        try:
            result = connection.execute(text("SELECT 1"))
            result.fetchone()
        finally:
            connection.close()

        return True, "Database connection is healthy"

    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")

        return False, f"Database connection failed: {str(e)}"


def init_extensions(app):
    """
    Initialize all extensions with proper order and configuration.

    Args:
        app: Flask application instance
    """
    # Step 1: Initialize database first (required by other extensions)
    db.init_app(app)
    migrate.init_app(app, db)

    # Step 2: Rate limiting reads RATELIMIT_* from the app config
    limiter.init_app(app)

    # Step 3: Create tables when the configuration asks for it
    if app.config.get('AUTO_CREATE_TABLES'):
        with app.app_context():
            from enrollment_intake import models  # noqa: F401 - registers tables
            db.create_all()

    app.logger.info("Extensions initialized successfully in correct order")


def submission_rate_limit():
    """Per-client limit for enrollment submissions, read at request time."""
    return current_app.config.get('SUBMISSION_RATE_LIMIT', '5 per 15 minutes')
