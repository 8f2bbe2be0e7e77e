"""Authentication routes"""
import logging
from datetime import datetime
from flask_login import login_required, current_user
from shg import db
from shg.auth import auth_bp
from shg.models import User
from shg.auth.forms import LoginForm, ChangePasswordForm
from shg.utils.helpers import api_response, api_error, form_errors, log_activity
from shg.utils.tokens import create_access_token

logger = logging.getLogger(__name__)

@auth_bp.route('/login', methods=['POST'])
def login():
    """Exchange username (or email) and password for a bearer token"""
    form = LoginForm.from_json()
    if not form.validate():
        return api_error('Username and password are required', 400, form_errors(form))

    username = form.username.data.strip()
    user = User.query.filter(
        db.or_(User.username == username, db.func.lower(User.email) == username.lower())
    ).first()

    if user is None or not user.check_password(form.password.data):
        log_activity(user, 'Login', 'User', user.id if user else None,
                     description=f'Failed login for {username}',
                     is_success=False, error_message='Invalid username or password',
                     status_code=401, commit=True)
        return api_error('Invalid username or password', 401)

    if not user.is_active:
        log_activity(user, 'Login', 'User', user.id,
                     description=f'Login refused for inactive member {username}',
                     is_success=False, error_message='Account is inactive',
                     status_code=401, commit=True)
        return api_error('Your account has been deactivated. Please contact the secretary.', 401)

    token, expires_at = create_access_token(user)
    user.last_login = datetime.utcnow()

    log_activity(user, 'Login', 'User', user.id,
                 description=f'User {user.username} logged in', status_code=200)
    db.session.commit()
    logger.info('Member %s logged in', user.id)

    return api_response({
        'token': token,
        'expires_at': expires_at.isoformat(),
        'user': user.to_summary(),
    }, 'Login successful')

@auth_bp.route('/me')
@login_required
def me():
    """Current member"""
    return api_response(current_user.to_dict())

@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """Change own password"""
    form = ChangePasswordForm.from_json()
    if not form.validate():
        return api_error('Invalid password change request', 400, form_errors(form))

    if not current_user.check_password(form.current_password.data):
        return api_error('Current password is incorrect', 400)

    current_user.set_password(form.new_password.data)
    log_activity(current_user, 'ChangePassword', 'User', current_user.id,
                 description=f'User {current_user.username} changed password', status_code=200)
    db.session.commit()

    return api_response(None, 'Your password has been changed successfully!')
