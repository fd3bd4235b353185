"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # Session cookie (fi_session). Secure flag follows ENV == 'production'.
    SESSION_DURATION_DAYS = int(os.getenv('SESSION_DURATION_DAYS', '7'))
    SESSION_COOKIE_DOMAIN = os.getenv('SESSION_COOKIE_DOMAIN') or None
    LOGIN_URL = os.getenv('LOGIN_URL', '/login')

    # Hostname / surface resolution
    PRODUCTION_DOMAIN = os.getenv('PRODUCTION_DOMAIN', 'faith-interactive.com')
    LOCAL_DOMAIN = os.getenv('LOCAL_DOMAIN', 'faith-interactive.local')
    LOCAL_PORT = int(os.getenv('LOCAL_PORT', '5000'))

    # Preferred URL scheme (for url_for with _external=True)
    PREFERRED_URL_SCHEME = os.getenv('PREFERRED_URL_SCHEME', 'http')

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        # Try DB_* variables (Docker style)
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'faithsite')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'faithsite')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'faithsite')

        DATABASE_URL = (
            f"postgresql+psycopg://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL')  # Defaults to DEBUG in development, INFO otherwise

    # Rate limiting (public endpoints)
    RATE_LIMIT_MAX = int(os.getenv('RATE_LIMIT_MAX', '100'))
    RATE_LIMIT_WINDOW_SECONDS = int(os.getenv('RATE_LIMIT_WINDOW_SECONDS', '60'))
    RATE_LIMIT_SWEEP_SECONDS = int(os.getenv('RATE_LIMIT_SWEEP_SECONDS', '300'))
    RATE_LIMIT_BACKEND = os.getenv('RATE_LIMIT_BACKEND', 'memory')  # memory | redis
    RATE_LIMIT_PREFIX = os.getenv('RATE_LIMIT_PREFIX', 'faithsite:rl:')

    # Redis (shared rate-limit counters when RATE_LIMIT_BACKEND=redis)
    REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/0')

    # Account lockout
    MAX_FAILED_ATTEMPTS = int(os.getenv('MAX_FAILED_ATTEMPTS', '5'))
    LOCKOUT_DURATION_MINUTES = int(os.getenv('LOCKOUT_DURATION_MINUTES', '15'))
    ATTEMPT_WINDOW_MINUTES = int(os.getenv('ATTEMPT_WINDOW_MINUTES', '15'))


class TestingConfig(Config):
    """Configuration used by the test suite (in-memory SQLite)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = os.getenv('TEST_DATABASE_URL', 'sqlite://')
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_EXPIRE_ON_COMMIT = False  # Fixtures stay readable after the request session is removed
    RATE_LIMIT_BACKEND = 'memory'
    LOG_LEVEL = 'WARNING'
    WTF_CSRF_ENABLED = False
