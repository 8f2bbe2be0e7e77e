"""Member management routes"""
import logging
from flask import current_app
from flask_login import login_required, current_user
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from shg import db
from shg.users import users_bp
from shg.models import ActivityLog, LoanRequest, User
from shg.users.forms import MemberForm
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, form_errors, log_activity, log_failure

logger = logging.getLogger(__name__)

def _email_taken(email, exclude_id=None):
    query = User.query.filter(db.func.lower(User.email) == email.strip().lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return db.session.query(query.exists()).scalar()

@users_bp.route('/health')
def health():
    """Database connectivity check"""
    try:
        db.session.execute(text('SELECT 1'))
        count = User.query.count()
    except SQLAlchemyError as e:
        logger.error('Health check failed: %s', e)
        return api_error('Database unavailable', 503)
    return api_response({'database': 'ok', 'user_count': count}, 'Healthy')

@users_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_users():
    """List all members"""
    users = User.query.order_by(User.name).all()
    return api_response([u.to_dict() for u in users])

@users_bp.route('/<int:id>', methods=['GET'])
@login_required
@admin_required
def view_user(id):
    """View member"""
    user = db.get_or_404(User, id, description='User not found')
    return api_response(user.to_dict())

@users_bp.route('', methods=['POST'])
@login_required
@admin_required
def add_user():
    """Add new member with a default login"""
    form = MemberForm.from_json()
    if not form.validate():
        return api_error('Invalid member details', 400, form_errors(form))

    email = form.email.data.strip()
    if _email_taken(email):
        return log_failure(current_user, 'Create', 'User',
                           f'A user with email {email} already exists', 400)

    user = User(
        name=form.name.data.strip(),
        address=form.address.data or None,
        email=email,
        phone=form.phone.data or None,
        username=email.lower(),
        role=form.role.data or 'member',
        joining_date=form.joining_date.data,
        inactive_date=form.inactive_date.data,
        is_active=form.active_flag()
    )
    user.set_password(form.password.data or current_app.config['DEFAULT_MEMBER_PASSWORD'])
    db.session.add(user)
    db.session.flush()

    log_activity(current_user, 'Create', 'User', user.id,
                 description=f'Added member {user.name}',
                 details={'email': user.email, 'role': user.role}, status_code=201)
    db.session.commit()
    logger.info('Member %s created by %s', user.id, current_user.id)

    return api_response(user.to_dict(), 'User created successfully', 201)

@users_bp.route('/<int:id>', methods=['PUT'])
@login_required
@admin_required
def edit_user(id):
    """Edit member"""
    user = db.get_or_404(User, id, description='User not found')
    form = MemberForm.from_json()
    if not form.validate():
        return api_error('Invalid member details', 400, form_errors(form))

    email = form.email.data.strip()
    if _email_taken(email, exclude_id=user.id):
        return log_failure(current_user, 'Update', 'User',
                           f'A user with email {email} already exists', 400, entity_id=user.id)

    user.name = form.name.data.strip()
    user.address = form.address.data or None
    if user.email.lower() != email.lower() and user.username == user.email.lower():
        user.username = email.lower()
    user.email = email
    user.phone = form.phone.data or None
    user.role = form.role.data if form.role.raw_data else user.role
    user.joining_date = form.joining_date.data
    user.inactive_date = form.inactive_date.data
    user.is_active = form.active_flag(default=user.is_active)
    if form.password.data:
        user.set_password(form.password.data)

    log_activity(current_user, 'Update', 'User', user.id,
                 description=f'Updated member {user.name}', status_code=200)
    db.session.commit()

    return api_response(user.to_dict(), 'User updated successfully')

@users_bp.route('/<int:id>', methods=['DELETE'])
@login_required
@admin_required
def delete_user(id):
    """Delete member"""
    user = db.get_or_404(User, id, description='User not found')

    if user.id == current_user.id:
        return api_error('You cannot delete your own account', 400)
    if user.loans.count() or user.loan_requests.count():
        return log_failure(current_user, 'Delete', 'User',
                           'Cannot delete a member who has loans or loan requests', 409, entity_id=user.id)

    # Keep the audit trail and processed requests, minus the link to the deleted member
    LoanRequest.query.filter_by(processed_by_id=user.id).update({'processed_by_id': None})
    ActivityLog.query.filter_by(user_id=user.id).update({'user_id': None})

    name = user.name
    db.session.delete(user)
    log_activity(current_user, 'Delete', 'User', id,
                 description=f'Deleted member {name}', status_code=200)
    db.session.commit()

    return api_response(None, 'User deleted successfully')
