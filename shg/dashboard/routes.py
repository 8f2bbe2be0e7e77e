"""Dashboard routes"""
from datetime import date
from decimal import Decimal
from flask import request
from flask_login import login_required
from sqlalchemy import func
from shg import db
from shg.dashboard import dashboard_bp
from shg.models import Meeting, MeetingPayment, Attendance, Loan, User
from shg.interest import is_open_loan, to_decimal
from shg.utils.helpers import api_response, api_error, parse_date, get_page_args, paginated

def _date_range():
    start_date = parse_date(request.args.get('start_date'))
    end_date = parse_date(request.args.get('end_date'))
    if start_date and end_date and start_date > end_date:
        return None, None, api_error('start_date must be on or before end_date', 400)
    return start_date, end_date, None

def _filter_meetings(query, start_date, end_date):
    if start_date:
        query = query.filter(Meeting.date >= start_date)
    if end_date:
        query = query.filter(Meeting.date <= end_date)
    return query

def _payment_totals(meeting_ids):
    if not meeting_ids:
        return Decimal('0'), Decimal('0')
    main_total, weekly_total = db.session.query(
        func.coalesce(func.sum(MeetingPayment.main_payment), 0),
        func.coalesce(func.sum(MeetingPayment.weekly_payment), 0)
    ).filter(MeetingPayment.meeting_id.in_(meeting_ids)).one()
    return to_decimal(main_total), to_decimal(weekly_total)

@dashboard_bp.route('/summary')
@login_required
def summary():
    """Group-wide figures for the dashboard"""
    start_date, end_date, error = _date_range()
    if error:
        return error

    today = date.today()
    meeting_query = _filter_meetings(Meeting.query, start_date, end_date)
    meeting_ids = [m.id for m in meeting_query.with_entities(Meeting.id)]
    main_total, weekly_total = _payment_totals(meeting_ids)

    loans = Loan.query.all()
    total_loan_amount = sum((to_decimal(l.amount) for l in loans), Decimal('0'))
    total_interest_received = sum((to_decimal(l.interest_received) for l in loans), Decimal('0'))
    overdue_count = sum(1 for l in loans if is_open_loan(l) and l.due_date < today)

    recent_meetings = meeting_query.order_by(Meeting.date.desc(), Meeting.id.desc()).limit(5).all()
    recent_loans = Loan.query.order_by(Loan.date.desc(), Loan.id.desc()).limit(5).all()

    return api_response({
        'total_meetings': len(meeting_ids),
        'total_main_payment': float(main_total),
        'total_weekly_payment': float(weekly_total),
        'total_payment': float(main_total + weekly_total),
        'total_eligible_users': User.eligible_on(today).filter(User.is_active.is_(True)).count(),
        'total_loans': len(loans),
        'total_loan_amount': float(total_loan_amount),
        'total_interest_received': float(total_interest_received),
        'overdue_loans': overdue_count,
        'recent_meetings': [m.to_dict() for m in recent_meetings],
        'recent_loans': [l.to_dict(today) for l in recent_loans],
    })

@dashboard_bp.route('/meetings')
@login_required
def meetings():
    """Paginated meeting details with totals across every page"""
    start_date, end_date, error = _date_range()
    if error:
        return error

    page, page_size = get_page_args()
    query = _filter_meetings(Meeting.query, start_date, end_date)
    meeting_ids = [m.id for m in query.with_entities(Meeting.id)]

    pagination = query.order_by(Meeting.date.desc(), Meeting.id.desc()).paginate(
        page=page, per_page=page_size, error_out=False
    )
    data = paginated(pagination, [m.to_details() for m in pagination.items])

    main_total, weekly_total = _payment_totals(meeting_ids)
    present_total = 0
    if meeting_ids:
        present_total = Attendance.query.filter(
            Attendance.meeting_id.in_(meeting_ids), Attendance.is_present.is_(True)
        ).count()
    data['totals'] = {
        'total_main_payment': float(main_total),
        'total_weekly_payment': float(weekly_total),
        'total_payment': float(main_total + weekly_total),
        'total_present': present_total,
    }
    return api_response(data)
