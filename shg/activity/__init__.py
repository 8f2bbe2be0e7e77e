from flask import Blueprint

activity_bp = Blueprint('activity', __name__)

from shg.activity import routes  # noqa: E402,F401
