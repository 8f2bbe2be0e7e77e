"""Helper functions"""
import logging
from datetime import datetime, date
from dateutil import parser as date_parser
from flask import jsonify, request, current_app
from shg import db
from shg.models import ActivityLog

logger = logging.getLogger(__name__)


def api_response(data=None, message='', status=200, errors=None):
    """Standard JSON envelope used by every endpoint"""
    body = {
        'success': status < 400,
        'message': message,
        'data': data,
        'errors': errors or [],
        'timestamp': datetime.utcnow().isoformat() + 'Z',
    }
    return jsonify(body), status


def api_error(message, status=400, errors=None):
    return api_response(None, message, status, errors)


def form_errors(form):
    """Flatten WTForms errors into ``field: message`` strings"""
    messages = []
    for field, field_errors in form.errors.items():
        for error in field_errors:
            messages.append(f'{field}: {error}')
    return messages


def parse_date(value, default=None):
    """Parse a query-string date ('2024-01-31' or an ISO datetime) to a date"""
    if value in (None, ''):
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        return default


def get_page_args(default_size=None):
    """``page`` and ``page_size`` from the query string, clamped to sane values"""
    default_size = default_size or current_app.config['ITEMS_PER_PAGE']
    page = request.args.get('page', 1, type=int)
    page_size = request.args.get('page_size', default_size, type=int)
    page = max(page or 1, 1)
    page_size = min(max(page_size or default_size, 1), current_app.config['MAX_PAGE_SIZE'])
    return page, page_size


def paginated(pagination, items):
    return {
        'items': items,
        'page': pagination.page,
        'page_size': pagination.per_page,
        'total_count': pagination.total,
        'total_pages': pagination.pages,
        'has_next': pagination.has_next,
        'has_previous': pagination.has_prev,
    }


def log_activity(user, action, entity_type=None, entity_id=None, description=None,
                 details=None, is_success=True, error_message=None, status_code=None, commit=False):
    """Add an audit entry to the session; commit immediately when asked"""
    entry = ActivityLog.record(
        user, action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        details=details,
        is_success=is_success,
        error_message=error_message,
        status_code=status_code
    )
    db.session.add(entry)
    if commit:
        db.session.commit()
    if not is_success:
        logger.warning('%s %s failed: %s', action, entity_type or '', error_message or description)
    return entry


def log_failure(user, action, entity_type, message, status_code, entity_id=None, details=None):
    """Record a rejected request and return the matching error response"""
    db.session.rollback()
    log_activity(user, action, entity_type, entity_id,
                 description=message, details=details, is_success=False,
                 error_message=message, status_code=status_code, commit=True)
    return api_error(message, status_code)
