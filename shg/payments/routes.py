"""Meeting payment routes"""
from flask_login import login_required, current_user
from shg import db
from shg.payments import payments_bp
from shg.models import MeetingPayment, Meeting, User
from shg.payments.forms import PaymentForm, BulkPaymentForm
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, form_errors, log_activity

def _check_references(user_id, meeting_id):
    if db.session.get(User, user_id) is None:
        return f'User {user_id} does not exist'
    if db.session.get(Meeting, meeting_id) is None:
        return f'Meeting {meeting_id} does not exist'
    return None

@payments_bp.route('', methods=['GET'])
@login_required
def list_payments():
    """List meeting payments"""
    payments = MeetingPayment.query.order_by(MeetingPayment.meeting_id.desc(), MeetingPayment.id).all()
    return api_response([p.to_dict() for p in payments])

@payments_bp.route('/<int:id>', methods=['GET'])
@login_required
def view_payment(id):
    payment = db.get_or_404(MeetingPayment, id, description='Payment not found')
    return api_response(payment.to_dict())

@payments_bp.route('/meeting/<int:meeting_id>')
@login_required
def meeting_payments(meeting_id):
    """Payments of one meeting with totals"""
    meeting = db.get_or_404(Meeting, meeting_id, description='Meeting not found')
    data = {
        'meeting': meeting.to_dict(),
        'payments': [p.to_dict() for p in meeting.payments.order_by(MeetingPayment.id)],
    }
    data.update(meeting.payment_totals())
    return api_response(data)

@payments_bp.route('', methods=['POST'])
@login_required
@admin_required
def add_payment():
    """Record a payment; a second payment for the same member and meeting replaces the first"""
    form = PaymentForm.from_json()
    if not form.validate():
        return api_error('Invalid payment details', 400, form_errors(form))

    error = _check_references(form.user_id.data, form.meeting_id.data)
    if error:
        return api_error(error, 400)

    payment = MeetingPayment.query.filter_by(
        user_id=form.user_id.data, meeting_id=form.meeting_id.data
    ).first()
    created = payment is None
    if created:
        payment = MeetingPayment(user_id=form.user_id.data, meeting_id=form.meeting_id.data)
        db.session.add(payment)

    payment.main_payment = form.main_payment.data
    payment.weekly_payment = form.weekly_payment.data
    db.session.flush()

    log_activity(current_user, 'Create' if created else 'Update', 'MeetingPayment', payment.id,
                 description=f'Payment of user {payment.user_id} at meeting {payment.meeting_id}',
                 details={'main_payment': payment.main_payment, 'weekly_payment': payment.weekly_payment},
                 status_code=201 if created else 200)
    db.session.commit()

    if created:
        return api_response(payment.to_dict(), 'Payment recorded successfully', 201)
    return api_response(payment.to_dict(), 'Existing payment updated successfully')

@payments_bp.route('/<int:id>', methods=['PUT'])
@login_required
@admin_required
def edit_payment(id):
    payment = db.get_or_404(MeetingPayment, id, description='Payment not found')
    form = PaymentForm.from_json()
    if not form.validate():
        return api_error('Invalid payment details', 400, form_errors(form))

    error = _check_references(form.user_id.data, form.meeting_id.data)
    if error:
        return api_error(error, 400)

    clash = MeetingPayment.query.filter(
        MeetingPayment.user_id == form.user_id.data,
        MeetingPayment.meeting_id == form.meeting_id.data,
        MeetingPayment.id != payment.id
    ).first()
    if clash:
        return api_error('A payment already exists for this user and meeting', 400)

    payment.user_id = form.user_id.data
    payment.meeting_id = form.meeting_id.data
    payment.main_payment = form.main_payment.data
    payment.weekly_payment = form.weekly_payment.data

    log_activity(current_user, 'Update', 'MeetingPayment', payment.id,
                 description='Updated payment', status_code=200)
    db.session.commit()

    return api_response(payment.to_dict(), 'Payment updated successfully')

@payments_bp.route('/<int:id>', methods=['DELETE'])
@login_required
@admin_required
def delete_payment(id):
    payment = db.get_or_404(MeetingPayment, id, description='Payment not found')
    db.session.delete(payment)
    log_activity(current_user, 'Delete', 'MeetingPayment', id, description='Deleted payment', status_code=200)
    db.session.commit()
    return api_response(None, 'Payment deleted successfully')

@payments_bp.route('/bulk', methods=['POST'])
@login_required
@admin_required
def bulk_payments():
    """Replace every payment of a meeting"""
    form = BulkPaymentForm.from_json()
    if not form.validate():
        return api_error('Invalid payment details', 400, form_errors(form))

    meeting = db.session.get(Meeting, form.meeting_id.data)
    if meeting is None:
        return api_error(f'Meeting {form.meeting_id.data} does not exist', 400)

    entries = [entry.data for entry in form.payments]
    user_ids = [entry['user_id'] for entry in entries]
    if len(set(user_ids)) != len(user_ids):
        return api_error('Each member may appear only once', 400)
    known = {u.id for u in User.query.filter(User.id.in_(user_ids))} if user_ids else set()
    missing = sorted(set(user_ids) - known)
    if missing:
        return api_error(f'Users do not exist: {", ".join(str(m) for m in missing)}', 400)

    MeetingPayment.query.filter_by(meeting_id=meeting.id).delete()
    for entry in entries:
        db.session.add(MeetingPayment(
            user_id=entry['user_id'],
            meeting_id=meeting.id,
            main_payment=entry['main_payment'],
            weekly_payment=entry['weekly_payment']
        ))

    log_activity(current_user, 'BulkUpdate', 'MeetingPayment', meeting.id,
                 description=f'Replaced payments for meeting {meeting.description}',
                 details={'count': len(entries)}, status_code=200)
    db.session.commit()

    data = {'payments': [p.to_dict() for p in meeting.payments.order_by(MeetingPayment.id)]}
    data.update(meeting.payment_totals())
    return api_response(data, 'Payments saved successfully')
