"""JSON error handlers"""
import logging
from werkzeug.exceptions import HTTPException
from shg import db
from shg.interest import InvalidArgument
from shg.utils.helpers import api_error

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return api_error(e.description or e.name, e.code)

    @app.errorhandler(InvalidArgument)
    def handle_invalid_argument(e):
        db.session.rollback()
        return api_error(str(e), 400)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        logger.exception('Unhandled error on request')
        return api_error('An unexpected error occurred', 500)
