"""Loan request routes"""
import logging
from datetime import date, datetime
from flask import request, abort
from flask_login import login_required, current_user
from shg import db
from shg.loan_requests import loan_requests_bp
from shg.models import LoanRequest, LoanType
from shg.loan_requests.forms import LoanRequestForm, LoanRequestActionForm
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, form_errors, log_activity, log_failure

logger = logging.getLogger(__name__)

def get_visible_request(id):
    loan_request = db.get_or_404(LoanRequest, id, description='Loan request not found')
    if not current_user.is_admin and loan_request.user_id != current_user.id:
        abort(403, description='You can only access your own loan requests')
    return loan_request

@loan_requests_bp.route('', methods=['POST'])
@login_required
def add_request():
    """Apply for a loan"""
    form = LoanRequestForm.from_json()
    if not form.validate():
        return api_error('Invalid loan request', 400, form_errors(form))

    if form.loan_type_id.data is not None and db.session.get(LoanType, form.loan_type_id.data) is None:
        return api_error(f'Loan type {form.loan_type_id.data} does not exist', 400)

    loan_request = LoanRequest(
        user_id=current_user.id,
        loan_type_id=form.loan_type_id.data,
        amount=form.amount.data,
        date=date.today(),
        due_date=form.due_date.data,
        loan_term=form.loan_term.data,
        description=form.description.data or None,
        cheque_number=form.cheque_number.data or None,
        status=LoanRequest.STATUS_REQUESTED
    )
    db.session.add(loan_request)
    db.session.flush()

    log_activity(current_user, 'Create', 'LoanRequest', loan_request.id,
                 description=f'Requested a loan of {loan_request.amount}',
                 details={'amount': loan_request.amount, 'due_date': loan_request.due_date},
                 status_code=201)
    db.session.commit()

    return api_response(loan_request.to_dict(), 'Loan request submitted successfully', 201)

@loan_requests_bp.route('', methods=['GET'])
@login_required
def list_requests():
    """Admins see every request (or one member's), members their own"""
    query = LoanRequest.query
    if current_user.is_admin:
        user_id = request.args.get('user_id', type=int)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
    else:
        query = query.filter_by(user_id=current_user.id)

    status = request.args.get('status', '')
    if status:
        query = query.filter(db.func.lower(LoanRequest.status) == status.lower())

    requests = query.order_by(LoanRequest.created_at.desc(), LoanRequest.id.desc()).all()
    return api_response([r.to_dict() for r in requests])

@loan_requests_bp.route('/<int:id>', methods=['GET'])
@login_required
def view_request(id):
    return api_response(get_visible_request(id).to_dict())

@loan_requests_bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete_request(id):
    """Withdraw or remove a loan request"""
    loan_request = get_visible_request(id)
    db.session.delete(loan_request)
    log_activity(current_user, 'Delete', 'LoanRequest', id,
                 description=f'Deleted loan request {id}', status_code=200)
    db.session.commit()
    return api_response(None, 'Loan request deleted successfully')

@loan_requests_bp.route('/<int:id>/action', methods=['PUT'])
@login_required
@admin_required
def process_request(id):
    """Accept (creating the loan) or reject a pending request"""
    loan_request = db.get_or_404(LoanRequest, id, description='Loan request not found')
    form = LoanRequestActionForm.from_json()
    if not form.validate():
        return api_error("Action must be 'accepted' or 'rejected'", 400, form_errors(form))

    if not loan_request.is_pending:
        return log_failure(current_user, 'Process', 'LoanRequest',
                           f'Loan request has already been {loan_request.status.lower()}', 409,
                           entity_id=loan_request.id)

    loan_request.processed_date = datetime.utcnow()
    loan_request.processed_by_id = current_user.id

    if form.action.data == 'accepted':
        loan = loan_request.to_loan()
        db.session.add(loan)
        db.session.flush()
        loan_request.status = LoanRequest.STATUS_ACCEPTED
        loan_request.loan_id = loan.id
        message = 'Loan request accepted and loan created'
        logger.info('Loan request %s accepted as loan %s', loan_request.id, loan.id)
    else:
        loan_request.status = LoanRequest.STATUS_REJECTED
        message = 'Loan request rejected'

    log_activity(current_user, loan_request.status, 'LoanRequest', loan_request.id,
                 description=message, details={'loan_id': loan_request.loan_id}, status_code=200)
    db.session.commit()

    data = loan_request.to_dict()
    if loan_request.loan is not None:
        data['loan'] = loan_request.loan.to_dict()
    return api_response(data, message)
