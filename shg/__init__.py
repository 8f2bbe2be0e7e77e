"""Application factory and initialization"""
import logging
import logging.config
from datetime import datetime
from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from config import config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

logger = logging.getLogger(__name__)


def configure_logging(app):
    """Console logging for the ``shg`` package at the configured level"""
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'default',
            },
        },
        'loggers': {
            'shg': {
                'handlers': ['console'],
                'level': app.config.get('LOG_LEVEL', 'INFO'),
                'propagate': False,
            },
        },
    })


def create_app(config_name='default'):
    """Create and configure the Flask application"""
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # Models register the login loaders
    from shg import models  # noqa: F401
    from shg.utils.errors import register_error_handlers
    register_error_handlers(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        from shg.utils.helpers import api_error
        return api_error('Authentication required', 401)

    @app.before_request
    def start_timer():
        g.request_started_at = datetime.utcnow()
        logger.debug('Started %s %s', request.method, request.path)

    @app.after_request
    def log_request(response):
        started = g.get('request_started_at')
        elapsed = (datetime.utcnow() - started).total_seconds() * 1000 if started else 0
        logger.info('%s %s -> %s (%.0f ms)', request.method, request.path, response.status_code, elapsed)
        return response

    # Register blueprints
    from shg.auth import auth_bp
    from shg.users import users_bp
    from shg.meetings import meetings_bp
    from shg.attendance import attendance_bp
    from shg.payments import payments_bp
    from shg.loans import loans_bp
    from shg.loan_requests import loan_requests_bp
    from shg.dashboard import dashboard_bp
    from shg.activity import activity_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(meetings_bp, url_prefix='/api/meetings')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(payments_bp, url_prefix='/api/payments')
    app.register_blueprint(loans_bp, url_prefix='/api/loans')
    app.register_blueprint(loan_requests_bp, url_prefix='/api/loan-requests')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')
    app.register_blueprint(activity_bp, url_prefix='/api/activities')

    logger.info('Application created with %s configuration', config_name)
    return app
