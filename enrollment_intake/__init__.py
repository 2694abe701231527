"""
Application factory for the enrollment intake service.
This module creates and configures the Flask application using the application factory pattern.
"""

import os
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from enrollment_intake.config import config_by_name
from enrollment_intake.errors import ConflictError, NotFoundError, StorageError, ValidationError
from enrollment_intake.extensions import check_database_health, db, init_extensions

GENERAL_LIMIT_MESSAGE = 'Too many requests from this IP, please try again later.'
INTERNAL_ERROR_MESSAGE = 'Internal server error. Please try again later.'

ENDPOINTS = {
    'POST /send': 'Submit enrollment application (main endpoint)',
    'POST /api/route': 'Submit enrollment application (alternative)',
    'GET /api/students': 'Get all students (admin)',
    'GET /api/students/<id>': 'Get student by ID',
    'GET /health': 'Health check endpoint'
}

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s'


def _has_handler(logger, name):
    return any(handler.get_name() == name for handler in logger.handlers)


def setup_logging(app):
    """
    Configure logging for the application.

    Handlers go on the root logger so the named service loggers
    (enrollment_service, notification_service, email_service) share them.

    Args:
        app: Flask application instance
    """
    level = logging.DEBUG if app.debug else getattr(logging, app.config.get('LOG_LEVEL', 'INFO').upper(),
                                                    logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    # Test runs rely on pytest's log capture
    if not app.testing:
        log_format = logging.Formatter(LOG_FORMAT)

        if not _has_handler(root, 'enrollment_intake.file'):
            log_dir = app.config['LOG_DIR']
            os.makedirs(log_dir, exist_ok=True)

            # File handler with rotation
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=1024 * 1024 * 10,  # 10MB
                backupCount=5
            )
            file_handler.set_name('enrollment_intake.file')
            file_handler.setFormatter(log_format)
            file_handler.setLevel(logging.INFO)
            root.addHandler(file_handler)

        if not _has_handler(root, 'enrollment_intake.console'):
            console_handler = logging.StreamHandler()
            console_handler.set_name('enrollment_intake.console')
            console_handler.setFormatter(log_format)
            console_handler.setLevel(level)
            root.addHandler(console_handler)

    app.logger.setLevel(level)

    # Forcefully suppress SQLAlchemy logs
    sa_logger = logging.getLogger('sqlalchemy.engine')
    sa_logger.setLevel(logging.WARNING)
    sa_logger.propagate = False


def check_required_settings(app):
    """Refuse to start when a configuration lists settings it cannot run without."""
    missing = [key for key in app.config.get('REQUIRED_SETTINGS', ()) if not app.config.get(key)]
    if missing:
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")


def init_notifier(app):
    """
    Resolve mail settings once and attach the enrollment notifier.

    Args:
        app: Flask application instance
    """
    from enrollment_intake.services.notification_service import EnrollmentNotifier
    from enrollment_intake.utils.mailer import MailSettings

    settings = MailSettings.from_config(app.config)

    email_issues = settings.validate()
    if email_issues:
        app.logger.warning(f"Email configuration issues: {'; '.join(email_issues)}")
    else:
        app.logger.info("Email configuration validated successfully")

    app.extensions['enrollment_notifier'] = EnrollmentNotifier(
        settings,
        site_name=app.config.get('SITE_NAME', 'EduPlatform'),
        contact_phone=app.config.get('CONTACT_PHONE'),
        public_base_url=app.config.get('PUBLIC_BASE_URL', '')
    )


def register_blueprints(app):
    """
    Register all application blueprints.

    Args:
        app: Flask application instance
    """
    # Import blueprints here to avoid circular imports
    from .controllers.api import api_bp
    from .controllers.enrollment import enrollment_bp

    app.register_blueprint(enrollment_bp)
    app.register_blueprint(api_bp)

    app.logger.info("All blueprints registered successfully")


def register_error_handlers(app):
    """
    Register global error handlers.

    Args:
        app: Flask application instance
    """

    def internal_error_body(e):
        return {
            'success': False,
            'message': str(e) if app.debug else INTERNAL_ERROR_MESSAGE,
            'code': 'INTERNAL_ERROR'
        }

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({
            'success': False,
            'message': e.message,
            'errors': e.errors
        }), 400

    @app.errorhandler(ConflictError)
    def handle_conflict_error(e):
        return jsonify({
            'success': False,
            'message': e.message,
            'code': 'DUPLICATE_ENTRY',
            'field': e.field
        }), 409

    @app.errorhandler(NotFoundError)
    def handle_not_found_error(e):
        return jsonify({
            'success': False,
            'message': e.message
        }), 404

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        app.logger.error(f"Storage error: {e.message}", exc_info=e)
        return jsonify(internal_error_body(e)), 500

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify({
            'success': False,
            'message': f"API endpoint '{request.path}' not found",
            'availableEndpoints': ['/send', '/api/route', '/api/students', '/health']
        }), 404

    @app.errorhandler(405)
    def handle_405(e):
        return jsonify({
            'success': False,
            'message': f"Method {request.method} not allowed for '{request.path}'"
        }), 405

    @app.errorhandler(429)
    def handle_429(e):
        limit = getattr(e, 'limit', None)
        return jsonify({
            'success': False,
            'message': getattr(limit, 'error_message', None) or GENERAL_LIMIT_MESSAGE
        }), 429

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({
                'success': False,
                'message': e.description
            }), e.code

        app.logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        return jsonify(internal_error_body(e)), 500


def register_health_checks(app):
    """
    Register the service index and health check endpoints.

    Args:
        app: Flask application instance
    """
    started = time.monotonic()

    @app.route('/')
    def index():
        return jsonify({
            'success': True,
            'message': f"{app.config.get('SITE_NAME', 'EduPlatform')} Enrollment API is running!",
            'version': app.config.get('VERSION', '2.0.0'),
            'endpoints': ENDPOINTS,
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    @app.route('/health')
    def health_check():
        """Liveness plus database reachability."""
        healthy, message = check_database_health()

        body = {
            'status': 'OK' if healthy else 'DEGRADED',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'uptime': round(time.monotonic() - started, 3),
            'database': 'Connected' if healthy else 'Disconnected',
            'environment': app.config.get('ENVIRONMENT', 'development'),
            'version': app.config.get('VERSION', '2.0.0')
        }

        if not healthy:
            body['message'] = message
            return jsonify(body), 503

        return jsonify(body)


def register_shell_context(app):
    """
    Register shell context for flask shell command.

    Args:
        app: Flask application instance
    """

    @app.shell_context_processor
    def make_shell_context():
        from enrollment_intake.models import EnrollmentStatus, StudentEnrollment
        from enrollment_intake.services.enrollment_service import EnrollmentService
        return {
            'db': db,
            'StudentEnrollment': StudentEnrollment,
            'EnrollmentStatus': EnrollmentStatus,
            'EnrollmentService': EnrollmentService,
            'notifier': app.extensions['enrollment_notifier']
        }


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name (str): Configuration name ('development', 'production', 'testing')

    Returns:
        Flask: Configured Flask application instance

    Raises:
        RuntimeError: A production setting such as SECRET_KEY or DATABASE_URL is missing
    """
    # Load environment variables
    load_dotenv()

    # Create Flask application
    app = Flask(__name__)

    # Load configuration
    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    app.config.from_object(config_by_name[config_name])
    check_required_settings(app)

    # Trust X-Forwarded-For only for the configured number of proxy hops
    proxy_count = app.config.get('TRUSTED_PROXY_COUNT', 0)
    if proxy_count:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxy_count, x_proto=proxy_count)

    # Setup logging first
    setup_logging(app)
    app.logger.info(f"Starting application with config: {config_name}")

    # Initialize extensions
    init_extensions(app)
    init_notifier(app)

    # Register components
    register_blueprints(app)
    register_error_handlers(app)
    register_shell_context(app)
    register_health_checks(app)

    # Register CLI commands
    from .cli import register_cli_commands
    register_cli_commands(app)

    app.logger.info("Application factory completed successfully")

    return app
