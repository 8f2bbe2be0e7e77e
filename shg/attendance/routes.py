"""Attendance routes"""
from flask_login import login_required, current_user
from shg import db
from shg.attendance import attendance_bp
from shg.models import Attendance, Meeting, User
from shg.attendance.forms import AttendanceForm, BulkAttendanceForm
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, form_errors, log_activity, log_failure

def _check_references(user_id, meeting_id):
    """Error message when the member or meeting does not exist"""
    if db.session.get(User, user_id) is None:
        return f'User {user_id} does not exist'
    if db.session.get(Meeting, meeting_id) is None:
        return f'Meeting {meeting_id} does not exist'
    return None

@attendance_bp.route('', methods=['GET'])
@login_required
def list_attendance():
    """List attendance records"""
    records = Attendance.query.order_by(Attendance.meeting_id.desc(), Attendance.id).all()
    return api_response([a.to_dict() for a in records])

@attendance_bp.route('/<int:id>', methods=['GET'])
@login_required
def view_attendance(id):
    record = db.get_or_404(Attendance, id, description='Attendance not found')
    return api_response(record.to_dict())

@attendance_bp.route('/meeting/<int:meeting_id>')
@login_required
def meeting_attendance(meeting_id):
    """Attendance records of one meeting"""
    meeting = db.get_or_404(Meeting, meeting_id, description='Meeting not found')
    records = meeting.attendances.order_by(Attendance.id).all()
    return api_response([a.to_dict() for a in records])

@attendance_bp.route('', methods=['POST'])
@login_required
@admin_required
def add_attendance():
    """Mark a member present or absent"""
    form = AttendanceForm.from_json()
    if not form.validate():
        return api_error('Invalid attendance details', 400, form_errors(form))

    error = _check_references(form.user_id.data, form.meeting_id.data)
    if error:
        return api_error(error, 400)

    existing = Attendance.query.filter_by(user_id=form.user_id.data, meeting_id=form.meeting_id.data).first()
    if existing:
        return log_failure(current_user, 'Create', 'Attendance',
                           'Attendance already recorded for this user and meeting', 400,
                           entity_id=existing.id)

    record = Attendance(user_id=form.user_id.data, meeting_id=form.meeting_id.data,
                        is_present=form.is_present.data)
    db.session.add(record)
    db.session.flush()

    log_activity(current_user, 'Create', 'Attendance', record.id,
                 description=f'Recorded attendance of user {record.user_id} at meeting {record.meeting_id}',
                 details={'is_present': record.is_present}, status_code=201)
    db.session.commit()

    return api_response(record.to_dict(), 'Attendance recorded successfully', 201)

@attendance_bp.route('/<int:id>', methods=['PUT'])
@login_required
@admin_required
def edit_attendance(id):
    record = db.get_or_404(Attendance, id, description='Attendance not found')
    form = AttendanceForm.from_json()
    if not form.validate():
        return api_error('Invalid attendance details', 400, form_errors(form))

    error = _check_references(form.user_id.data, form.meeting_id.data)
    if error:
        return api_error(error, 400)

    clash = Attendance.query.filter(
        Attendance.user_id == form.user_id.data,
        Attendance.meeting_id == form.meeting_id.data,
        Attendance.id != record.id
    ).first()
    if clash:
        return api_error('Attendance already recorded for this user and meeting', 400)

    record.user_id = form.user_id.data
    record.meeting_id = form.meeting_id.data
    record.is_present = form.is_present.data

    log_activity(current_user, 'Update', 'Attendance', record.id,
                 description='Updated attendance', details={'is_present': record.is_present},
                 status_code=200)
    db.session.commit()

    return api_response(record.to_dict(), 'Attendance updated successfully')

@attendance_bp.route('/<int:id>', methods=['DELETE'])
@login_required
@admin_required
def delete_attendance(id):
    record = db.get_or_404(Attendance, id, description='Attendance not found')
    db.session.delete(record)
    log_activity(current_user, 'Delete', 'Attendance', id, description='Deleted attendance', status_code=200)
    db.session.commit()
    return api_response(None, 'Attendance deleted successfully')

@attendance_bp.route('/bulk', methods=['POST'])
@login_required
@admin_required
def bulk_attendance():
    """Replace every attendance record of a meeting"""
    form = BulkAttendanceForm.from_json()
    if not form.validate():
        return api_error('Invalid attendance details', 400, form_errors(form))

    meeting = db.session.get(Meeting, form.meeting_id.data)
    if meeting is None:
        return api_error(f'Meeting {form.meeting_id.data} does not exist', 400)

    entries = [entry.data for entry in form.attendances]
    user_ids = [entry['user_id'] for entry in entries]
    if len(set(user_ids)) != len(user_ids):
        return api_error('Each member may appear only once', 400)
    known = {u.id for u in User.query.filter(User.id.in_(user_ids))} if user_ids else set()
    missing = sorted(set(user_ids) - known)
    if missing:
        return api_error(f'Users do not exist: {", ".join(str(m) for m in missing)}', 400)

    Attendance.query.filter_by(meeting_id=meeting.id).delete()
    for entry in entries:
        db.session.add(Attendance(user_id=entry['user_id'], meeting_id=meeting.id,
                                  is_present=entry['is_present']))

    log_activity(current_user, 'BulkUpdate', 'Attendance', meeting.id,
                 description=f'Replaced attendance for meeting {meeting.description}',
                 details={'count': len(entries)}, status_code=200)
    db.session.commit()

    records = meeting.attendances.order_by(Attendance.id).all()
    return api_response([a.to_dict() for a in records], 'Attendance saved successfully')
