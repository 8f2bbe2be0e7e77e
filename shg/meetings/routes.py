"""Meeting routes"""
import logging
from datetime import datetime
from flask_login import login_required, current_user
from shg import db
from shg.meetings import meetings_bp
from shg.models import Meeting, Attendance, User
from shg.meetings.forms import MeetingForm, MeetingMinutesForm
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, form_errors, log_activity

logger = logging.getLogger(__name__)

def meeting_summary(meeting):
    data = meeting.to_dict()
    data.update(meeting.payment_totals())
    data.update(meeting.attendance_counts())
    return data

@meetings_bp.route('', methods=['GET'])
@login_required
def list_meetings():
    """List meetings, newest first"""
    meetings = Meeting.query.order_by(Meeting.date.desc(), Meeting.id.desc()).all()
    return api_response([m.to_dict() for m in meetings])

@meetings_bp.route('/<int:id>', methods=['GET'])
@login_required
def view_meeting(id):
    """View meeting"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')
    return api_response(meeting.to_dict())

@meetings_bp.route('', methods=['POST'])
@login_required
@admin_required
def add_meeting():
    """Schedule a meeting"""
    form = MeetingForm.from_json()
    if not form.validate():
        return api_error('Invalid meeting details', 400, form_errors(form))

    meeting = Meeting(
        date=form.date.data,
        time=form.time.data or None,
        description=form.description.data.strip(),
        location=form.location.data or None
    )
    db.session.add(meeting)
    db.session.flush()

    log_activity(current_user, 'Create', 'Meeting', meeting.id,
                 description=f'Created meeting {meeting.description} on {meeting.date}',
                 status_code=201)
    db.session.commit()

    return api_response(meeting.to_dict(), 'Meeting created successfully', 201)

@meetings_bp.route('/<int:id>', methods=['PUT'])
@login_required
@admin_required
def edit_meeting(id):
    """Edit meeting"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')
    form = MeetingForm.from_json()
    if not form.validate():
        return api_error('Invalid meeting details', 400, form_errors(form))

    meeting.date = form.date.data
    meeting.time = form.time.data or None
    meeting.description = form.description.data.strip()
    meeting.location = form.location.data or None

    log_activity(current_user, 'Update', 'Meeting', meeting.id,
                 description=f'Updated meeting {meeting.description}', status_code=200)
    db.session.commit()

    return api_response(meeting.to_dict(), 'Meeting updated successfully')

@meetings_bp.route('/<int:id>', methods=['DELETE'])
@login_required
@admin_required
def delete_meeting(id):
    """Delete meeting with its attendance and payments"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')
    description = meeting.description

    db.session.delete(meeting)
    log_activity(current_user, 'Delete', 'Meeting', id,
                 description=f'Deleted meeting {description}', status_code=200)
    db.session.commit()

    return api_response(None, 'Meeting deleted successfully')

@meetings_bp.route('/<int:id>/details')
@login_required
def meeting_details(id):
    """Meeting with attendance, payments and totals"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')
    return api_response(meeting.to_details())

@meetings_bp.route('/<int:id>/summary')
@login_required
def view_summary(id):
    """Totals for one meeting"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')
    return api_response(meeting_summary(meeting))

@meetings_bp.route('/summaries')
@login_required
def list_summaries():
    """Totals for every meeting"""
    meetings = Meeting.query.order_by(Meeting.date.desc(), Meeting.id.desc()).all()
    return api_response([meeting_summary(m) for m in meetings])

@meetings_bp.route('/minutes', methods=['POST'])
@login_required
@admin_required
def save_minutes():
    """Record minutes for a meeting"""
    form = MeetingMinutesForm.from_json()
    if not form.validate():
        return api_error('Invalid meeting minutes', 400, form_errors(form))

    meeting = db.session.get(Meeting, form.meeting_id.data)
    if meeting is None:
        return api_error('Meeting not found', 404)

    meeting.minutes = form.minutes.data or ''
    log_activity(current_user, 'Update', 'MeetingMinutes', meeting.id,
                 description=f'Saved minutes for {meeting.description}', status_code=200)
    db.session.commit()

    return api_response(meeting.to_dict(include_minutes=True), 'Meeting minutes saved successfully')

@meetings_bp.route('/<int:id>/minutes')
@login_required
@admin_required
def view_minutes(id):
    """Minutes of a meeting"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')
    return api_response(meeting.to_dict(include_minutes=True))

@meetings_bp.route('/<int:id>/comprehensive-summary')
@login_required
def comprehensive_summary(id):
    """Eligible members split into attended and absent, with absence reasons"""
    meeting = db.get_or_404(Meeting, id, description='Meeting not found')

    eligible = User.eligible_on(meeting.date).order_by(User.name).all()
    present_ids = {
        a.user_id for a in meeting.attendances.filter(Attendance.is_present.is_(True))
    }

    attended, absent = [], []
    for user in eligible:
        entry = {
            'user_id': user.id,
            'user_name': user.name,
            'email': user.email,
            'phone': user.phone,
            'role': user.role_enum.value,
            'joining_date': user.joining_date.isoformat() if user.joining_date else None,
            'inactive_date': user.inactive_date.isoformat() if user.inactive_date else None,
            'is_active': user.is_active,
            'absence_reason': '',
        }
        if user.id in present_ids:
            attended.append(entry)
        else:
            entry['absence_reason'] = user.absence_reason(meeting.date)
            absent.append(entry)

    total = len(eligible)
    percentage = round(len(attended) / total * 100, 2) if total else 0

    summary = meeting.to_dict(include_minutes=True)
    summary.update({
        'attended_users': attended,
        'absent_users': absent,
        'attendance_stats': {
            'total_eligible_users': total,
            'attended_count': len(attended),
            'absent_count': len(absent),
            'attendance_percentage': percentage,
            'absence_reasons': sorted({a['absence_reason'] for a in absent}),
        },
        'generated_at': datetime.utcnow().isoformat() + 'Z',
    })

    log_activity(current_user, 'View', 'MeetingSummary', meeting.id,
                 description=f'Generated comprehensive summary for {meeting.description}',
                 details={'eligible': total, 'attended': len(attended)}, status_code=200,
                 commit=True)
    logger.debug('Meeting %s: %s of %s eligible members attended', meeting.id, len(attended), total)

    return api_response(summary)
