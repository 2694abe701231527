import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration class with all settings as static attributes."""

    # Core configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-here'
    DEBUG = _env_flag('FLASK_DEBUG')
    VERSION = '2.0.0'
    ENVIRONMENT = os.environ.get('FLASK_ENV', 'development')

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///enrollment.db'
    if SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    # Disable track modifications for performance
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "pool_pre_ping": True,  # Check connection health before use
    }

    # Create tables on start-up (use `flask db upgrade` when migrations are managed)
    AUTO_CREATE_TABLES = _env_flag('AUTO_CREATE_TABLES', 'true')

    # Logging
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(os.path.dirname(BASE_DIR), 'logs')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Site settings
    SITE_NAME = os.environ.get('SITE_NAME', 'EduPlatform')
    CONTACT_PHONE = os.environ.get('CONTACT_PHONE', '+254 748 090 462')
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', 'http://localhost:5000')

    # Student listing
    STUDENTS_PER_PAGE = 20
    STUDENTS_MAX_PER_PAGE = 100

    # Rate limiting (Flask-Limiter reads the RATELIMIT_* keys)
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', 'true')
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '100 per 15 minutes')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True

    # Number of reverse proxies (e.g. nginx) in front of the app; 0 ignores X-Forwarded-For
    TRUSTED_PROXY_COUNT = int(os.environ.get('TRUSTED_PROXY_COUNT', 0))
    SUBMISSION_RATE_LIMIT = os.environ.get('SUBMISSION_RATE_LIMIT', '5 per 15 minutes')

    # Email configuration
    MAIL_PROVIDER = os.environ.get('EMAIL_SERVICE', 'gmail')
    MAIL_USERNAME = os.environ.get('EMAIL_USER')
    MAIL_PASSWORD = os.environ.get('EMAIL_PASS')
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    MAILGUN_SMTP_LOGIN = os.environ.get('MAILGUN_SMTP_LOGIN')
    MAILGUN_SMTP_PASSWORD = os.environ.get('MAILGUN_SMTP_PASSWORD')

    # Only consulted by the generic "smtp" provider
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', 'true')
    MAIL_USE_SSL = _env_flag('MAIL_USE_SSL')

    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER')
    MAIL_ADMIN_RECIPIENT = os.environ.get('ADMIN_EMAIL')
    MAIL_SUPPRESS_SEND = _env_flag('MAIL_SUPPRESS_SEND')
    MAIL_TIMEOUT = int(os.environ.get('MAIL_TIMEOUT', 30))


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    ENVIRONMENT = 'development'
    SQLALCHEMY_ECHO = _env_flag('SQL_DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    ENVIRONMENT = 'production'
    AUTO_CREATE_TABLES = _env_flag('AUTO_CREATE_TABLES')

    # Checked by the application factory; there are no fallbacks in production
    SECRET_KEY = os.environ.get('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI if os.environ.get('DATABASE_URL') else None

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }

    REQUIRED_SETTINGS = ('SECRET_KEY', 'SQLALCHEMY_DATABASE_URI')


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = False
    ENVIRONMENT = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTO_CREATE_TABLES = True

    RATELIMIT_ENABLED = False

    MAIL_PROVIDER = 'smtp'
    MAIL_SERVER = 'localhost'
    MAIL_PORT = 1025
    MAIL_USE_TLS = False
    MAIL_USE_SSL = False
    MAIL_USERNAME = 'admissions@eduplatform.org'
    MAIL_PASSWORD = None
    MAIL_DEFAULT_SENDER = 'EduPlatform Admissions <admissions@eduplatform.org>'
    MAIL_ADMIN_RECIPIENT = 'registrar@eduplatform.org'
    MAIL_SUPPRESS_SEND = True


# Configuration dictionary
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}

