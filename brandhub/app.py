"""
Flask Application Factory for BrandHub.

This module provides the create_app() factory function that creates and
configures the Flask application. It initializes:
- SQLAlchemy database connection (SQLite or DATABASE_URL)
- Flask-Migrate for schema migrations
- Blueprint registration
- Error handlers (HTTP errors and taxonomy errors)
- Logging configuration

Usage:
    # Development
    python -m brandhub.app

    # Production
    gunicorn -w 4 -b 0.0.0.0:5004 'brandhub.app:create_app()'
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from flask_migrate import Migrate

from brandhub.config import get_config
from brandhub.models import db
from brandhub.services.category_store import CategoryStoreError
from brandhub.services.taxonomy import (
    CycleError,
    NotFoundError,
    ResolutionRequiredError,
    ValidationError,
)

# Global migrate instance
migrate = Migrate()


def create_app(config_name: Optional[str] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name ('development',
            'testing', 'production'). If None, reads from FLASK_ENV.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Store config class for reference
    app.config['CONFIG_CLASS'] = config_class

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Create database tables
    with app.app_context():
        db.create_all()

    # Configure logging
    _configure_logging(app)

    # Register blueprints
    _register_blueprints(app)

    # Register error handlers
    _register_error_handlers(app)

    @app.route('/health')
    @app.route('/api/v1/health')
    def health_check():
        """Health check endpoint for monitoring."""
        return jsonify({
            'status': 'healthy',
            'service': 'brandhub',
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    return app


def _configure_logging(app: Flask) -> None:
    """
    Configure application logging.

    Module loggers under the brandhub package share the app's handlers
    and level.

    Args:
        app: Flask application instance.
    """
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    package_logger = logging.getLogger('brandhub')
    package_logger.setLevel(level)

    # Set up file handler if log path is writable
    if not app.testing:
        try:
            log_dir = app.config.get('LOG_DIR') or os.path.join(os.getcwd(), 'logs')
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(
                os.path.join(str(log_dir), 'brandhub.log')
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            app.logger.addHandler(file_handler)
            package_logger.addHandler(file_handler)
        except (OSError, PermissionError):
            # Log path not writable, skip file logging
            app.logger.warning('Log directory not writable, file logging disabled')

    # Set application log level
    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """
    Register API blueprints with the application.

    Args:
        app: Flask application instance.
    """
    from brandhub.routes import categories_bp
    app.register_blueprint(categories_bp, url_prefix='/api/v1/categories')
    app.logger.info('Registered categories blueprint at /api/v1/categories')


def _error_response(status_code: int, error: str, message: str, **extra):
    body = {
        'status': 'error',
        'error': error,
        'message': message,
    }
    body.update(extra)
    return jsonify(body), status_code


def _register_error_handlers(app: Flask) -> None:
    """
    Register error handlers for HTTP errors and taxonomy errors.

    Args:
        app: Flask application instance.
    """
    @app.errorhandler(ResolutionRequiredError)
    def resolution_required(error):
        return _error_response(
            409, 'Resolution Required', str(error),
            category_id=error.category_id,
            child_ids=error.child_ids,
        )

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return _error_response(400, 'Validation Error', str(error))

    @app.errorhandler(NotFoundError)
    def taxonomy_not_found(error):
        return _error_response(404, 'Not Found', str(error))

    @app.errorhandler(CycleError)
    def cycle_error(error):
        return _error_response(409, 'Cycle Error', str(error))

    @app.errorhandler(CategoryStoreError)
    def store_error(error):
        app.logger.error(f"Store failure: {error}")
        return _error_response(
            500, 'Store Error', str(error),
            hint='The taxonomy may be partially updated; re-fetch before retrying',
        )

    @app.errorhandler(400)
    def bad_request(error):
        return _error_response(
            400, 'Bad Request',
            str(error.description)
            if hasattr(error, 'description')
            else 'Invalid request'
        )

    @app.errorhandler(404)
    def not_found(error):
        return _error_response(404, 'Not Found', 'The requested resource was not found')

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error_response(
            405, 'Method Not Allowed', 'The method is not allowed for this resource'
        )

    @app.errorhandler(500)
    def internal_server_error(error):
        return _error_response(
            500, 'Internal Server Error', 'An unexpected error occurred'
        )


if __name__ == '__main__':
    # Development server
    application = create_app()
    config = application.config['CONFIG_CLASS']
    application.run(
        host=config.HOST,
        port=config.PORT,
        debug=config.DEBUG
    )
