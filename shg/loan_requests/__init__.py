from flask import Blueprint

loan_requests_bp = Blueprint('loan_requests', __name__)

from shg.loan_requests import routes  # noqa: E402,F401
