from flask import Blueprint

users_bp = Blueprint('users', __name__)

from shg.users import routes  # noqa: E402,F401
