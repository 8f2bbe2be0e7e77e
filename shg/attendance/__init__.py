from flask import Blueprint

attendance_bp = Blueprint('attendance', __name__)

from shg.attendance import routes  # noqa: E402,F401
