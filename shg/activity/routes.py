"""Activity log routes"""
from datetime import datetime, timedelta
from flask import request
from flask_login import login_required
from sqlalchemy import func
from shg import db
from shg.activity import activity_bp
from shg.models import ActivityLog, User
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, parse_date, get_page_args, paginated

def _bool_arg(name):
    value = request.args.get(name)
    if value is None or value == '':
        return None
    return value.strip().lower() in ('1', 'true', 'yes')

def filtered_activities():
    """Activity query narrowed by the request's filter arguments"""
    query = ActivityLog.query

    user_id = request.args.get('user_id', type=int)
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)

    action = request.args.get('action', '')
    if action:
        query = query.filter(func.lower(ActivityLog.action) == action.lower())

    entity_type = request.args.get('entity_type', '')
    if entity_type:
        query = query.filter(func.lower(ActivityLog.entity_type) == entity_type.lower())

    is_success = _bool_arg('is_success')
    if is_success is not None:
        query = query.filter(ActivityLog.is_success.is_(is_success))

    start_date = parse_date(request.args.get('start_date'))
    if start_date:
        query = query.filter(ActivityLog.created_at >= datetime.combine(start_date, datetime.min.time()))

    end_date = parse_date(request.args.get('end_date'))
    if end_date:
        query = query.filter(ActivityLog.created_at < datetime.combine(end_date + timedelta(days=1), datetime.min.time()))

    search = request.args.get('search', '').strip()
    if search:
        query = query.filter(
            db.or_(
                ActivityLog.description.ilike(f'%{search}%'),
                ActivityLog.user_name.ilike(f'%{search}%'),
                ActivityLog.endpoint.ilike(f'%{search}%')
            )
        )

    return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())

@activity_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_activities():
    """Filtered, paginated activity log"""
    page, page_size = get_page_args(default_size=50)
    pagination = filtered_activities().paginate(page=page, per_page=page_size, error_out=False)
    return api_response(paginated(pagination, [a.to_dict() for a in pagination.items]))

@activity_bp.route('/statistics')
@login_required
@admin_required
def statistics():
    """Counts by outcome, action, entity type and member"""
    query = filtered_activities().order_by(None)
    total = query.count()
    successful = query.filter(ActivityLog.is_success.is_(True)).count()

    def grouped(column):
        rows = query.with_entities(column, func.count(ActivityLog.id)).group_by(column).all()
        return {key or 'Unknown': count for key, count in rows}

    top_users = (
        query.with_entities(ActivityLog.user_id, ActivityLog.user_name, func.count(ActivityLog.id).label('total'))
        .filter(ActivityLog.user_id.isnot(None))
        .group_by(ActivityLog.user_id, ActivityLog.user_name)
        .order_by(func.count(ActivityLog.id).desc())
        .limit(10)
        .all()
    )
    average_duration = query.with_entities(func.avg(ActivityLog.duration_ms)).scalar()

    return api_response({
        'total_activities': total,
        'successful_activities': successful,
        'failed_activities': total - successful,
        'success_rate': round(successful / total * 100, 2) if total else 0,
        'average_duration_ms': round(float(average_duration), 2) if average_duration is not None else None,
        'by_action': grouped(ActivityLog.action),
        'by_entity_type': grouped(ActivityLog.entity_type),
        'top_users': [{'user_id': u, 'user_name': n, 'count': c} for u, n, c in top_users],
    })

@activity_bp.route('/recent')
@login_required
@admin_required
def recent():
    limit = request.args.get('limit', 20, type=int)
    if limit < 1 or limit > 100:
        return api_error('limit must be between 1 and 100', 400)
    activities = ActivityLog.query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
    return api_response([a.to_dict() for a in activities])

@activity_bp.route('/user/<int:user_id>')
@login_required
@admin_required
def user_activities(user_id):
    """Activity of one member"""
    db.get_or_404(User, user_id, description='User not found')
    page, page_size = get_page_args(default_size=50)
    pagination = ActivityLog.query.filter_by(user_id=user_id).order_by(
        ActivityLog.created_at.desc(), ActivityLog.id.desc()
    ).paginate(page=page, per_page=page_size, error_out=False)
    return api_response(paginated(pagination, [a.to_dict() for a in pagination.items]))

@activity_bp.route('/failed')
@login_required
@admin_required
def failed():
    """Failed attempts, newest first"""
    page, page_size = get_page_args(default_size=50)
    pagination = ActivityLog.query.filter(ActivityLog.is_success.is_(False)).order_by(
        ActivityLog.created_at.desc(), ActivityLog.id.desc()
    ).paginate(page=page, per_page=page_size, error_out=False)
    return api_response(paginated(pagination, [a.to_dict() for a in pagination.items]))

@activity_bp.route('/filter-options')
@login_required
@admin_required
def filter_options():
    """Distinct values for the activity filters"""
    actions = [a for (a,) in db.session.query(ActivityLog.action).distinct().order_by(ActivityLog.action) if a]
    entity_types = [e for (e,) in db.session.query(ActivityLog.entity_type).distinct().order_by(ActivityLog.entity_type) if e]
    users = User.query.order_by(User.name).all()
    return api_response({
        'actions': actions,
        'entity_types': entity_types,
        'users': [u.to_summary() for u in users],
    })
