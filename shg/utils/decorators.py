"""Utility decorators"""
from functools import wraps
from flask import abort
from flask_login import current_user

def admin_required(f):
    """Decorator to require secretary, president or treasurer role"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401, description='Authentication required')

        if not current_user.is_admin:
            abort(403, description='Admin access required')

        return f(*args, **kwargs)
    return decorated_function
