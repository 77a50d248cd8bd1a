"""
Stampcard loyalty service
Flask application factory
"""
import os
import logging
from flask import Flask
from flask_cors import CORS

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()
    validate_config(config_name)

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    CORS(app, origins=app.config['CORS_ORIGINS'], allow_headers=['Content-Type'])

    # Register blueprints
    register_blueprints(app)

    # Register CLI commands
    from .commands import init_app as init_commands
    init_commands(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'stampcard'}

    logger.info(f'Stampcard app created ({config_name})')
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.business import business_bp
    from .api.customers import customers_bp
    from .api.visits import visits_bp
    from .api.rewards import rewards_bp
    from .api.analytics import analytics_bp
    from .api.sms import sms_bp

    app.register_blueprint(business_bp, url_prefix='/api/business')
    app.register_blueprint(visits_bp, url_prefix='/api/business')
    app.register_blueprint(analytics_bp, url_prefix='/api/business')
    app.register_blueprint(sms_bp, url_prefix='/api/business')

    # Routes spanning /api/business/... and /api/customers/...
    app.register_blueprint(customers_bp, url_prefix='/api')
    app.register_blueprint(rewards_bp, url_prefix='/api')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from .utils import errors
    from .utils.errors import ErrorCode, error_response, loyalty_error_response
    from .utils.exceptions import LoyaltyError

    @app.errorhandler(LoyaltyError)
    def loyalty_error(error):
        return loyalty_error_response(error)

    @app.errorhandler(400)
    def bad_request(error):
        return errors.bad_request('Bad request')

    @app.errorhandler(404)
    def not_found(error):
        return errors.not_found('Not found')

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', ErrorCode.INVALID_REQUEST, 405, log_error=False)

    @app.errorhandler(500)
    def internal_error(error):
        return errors.internal_error('Internal server error')
