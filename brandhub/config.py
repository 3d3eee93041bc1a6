"""
BrandHub Configuration Module

Configuration settings for database, logging, and server.
All sensitive values are loaded from environment variables.
"""

import os
from pathlib import Path


def get_database_url(database_path):
    """Get database URL, converting postgres:// to postgresql:// for SQLAlchemy."""
    url = os.environ.get('DATABASE_URL')
    if url:
        if url.startswith('postgres://'):
            url = url.replace('postgres://', 'postgresql://', 1)
        return url
    # Fallback to SQLite for development
    return f'sqlite:///{database_path}'


class Config:
    """Base configuration class with default settings."""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Base Directory
    BASE_DIR = Path(__file__).parent.resolve()

    # Database Settings
    DATABASE_PATH = Path(
        os.environ.get('BRANDHUB_DATABASE_PATH', BASE_DIR / 'data' / 'brandhub.db')
    )
    SQLALCHEMY_DATABASE_URI = get_database_url(DATABASE_PATH)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('BRANDHUB_LOG_LEVEL', 'INFO').upper()
    LOG_DIR = Path(os.environ.get('BRANDHUB_LOG_DIR', BASE_DIR / 'logs'))

    # Server Settings
    PORT = int(os.environ.get('BRANDHUB_PORT', 5004))
    HOST = os.environ.get('BRANDHUB_HOST', '0.0.0.0')

    @classmethod
    def init_app(cls, app):
        """Initialize application with this configuration."""
        # Ensure storage directories exist
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """Development configuration with debug enabled."""

    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('BRANDHUB_LOG_LEVEL', 'DEBUG').upper()


class TestingConfig(Config):
    """Testing configuration with an in-memory database."""

    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    @classmethod
    def init_app(cls, app):
        """Nothing to create on disk for tests."""
        pass


class ProductionConfig(Config):
    """Production configuration with strict security settings."""

    DEBUG = False
    TESTING = False

    @classmethod
    def init_app(cls, app):
        """Production-specific initialization."""
        Config.init_app(app)

        # Verify required environment variables are set
        required_vars = [
            'SECRET_KEY',
        ]
        missing = [var for var in required_vars if not os.environ.get(var)]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


# Configuration mapping by environment name
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}


def get_config(env_name=None):
    """Get configuration class by environment name.

    Args:
        env_name: Environment name ('development', 'testing', 'production').
                  If None, reads from FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env_name is None:
        env_name = os.environ.get('FLASK_ENV', 'development')
    return config.get(env_name, config['default'])
