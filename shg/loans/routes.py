"""Loan management routes"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from flask import request, current_app, abort
from flask_login import login_required, current_user
from shg import db
from shg.loans import loans_bp
from shg.models import Loan, LoanRequest, LoanType, User
from shg.loans.forms import LoanForm, LoanTypeForm, RepaymentForm
from shg.interest import bucket_due_loans, due_soon_loans, to_decimal
from shg.utils.decorators import admin_required
from shg.utils.helpers import api_response, api_error, form_errors, log_activity, log_failure

logger = logging.getLogger(__name__)

def scoped_user_id():
    """Member whose loans a listing covers; ``None`` means everyone.

    Admins may pick a member with ``?user_id=``, everyone else only sees
    their own loans.
    """
    if current_user.is_admin:
        return request.args.get('user_id', type=int)
    return current_user.id

def get_visible_loan(id):
    loan = db.get_or_404(Loan, id, description='Loan not found')
    if not current_user.is_admin and loan.user_id != current_user.id:
        abort(403, description='You can only view your own loans')
    return loan

def bucket_summary(loans, today):
    """Projected loans plus count and total (amount and interest) of a bucket"""
    rows = [loan.to_dict(today) for loan in loans]
    total = sum((to_decimal(loan.amount) + loan.interest_amount(today) for loan in loans), Decimal('0'))
    return {'count': len(rows), 'total_amount': float(total), 'loans': rows}

def _apply_form(loan, form):
    loan.user_id = form.user_id.data
    loan.loan_type_id = form.loan_type_id.data
    loan.amount = form.amount.data
    loan.interest_rate = form.interest_rate.data
    loan.date = form.date.data
    loan.due_date = form.due_date.data
    loan.loan_term = form.loan_term.data
    loan.cheque_number = form.cheque_number.data or None
    loan.status = form.status.data or Loan.STATUS_ACTIVE

def _check_references(form):
    if db.session.get(User, form.user_id.data) is None:
        return f'User {form.user_id.data} does not exist'
    if form.loan_type_id.data is not None and db.session.get(LoanType, form.loan_type_id.data) is None:
        return f'Loan type {form.loan_type_id.data} does not exist'
    return None

@loans_bp.route('/types', methods=['GET'])
@login_required
def list_loan_types():
    """List loan types"""
    loan_types = LoanType.query.order_by(LoanType.name).all()
    return api_response([t.to_dict() for t in loan_types])

@loans_bp.route('/types', methods=['POST'])
@login_required
@admin_required
def add_loan_type():
    """Add loan type"""
    form = LoanTypeForm.from_json()
    if not form.validate():
        return api_error('Invalid loan type', 400, form_errors(form))

    name = form.name.data.strip()
    if LoanType.query.filter(db.func.lower(LoanType.name) == name.lower()).first():
        return api_error(f'Loan type {name} already exists', 400)

    loan_type = LoanType(name=name, interest_rate=form.interest_rate.data)
    db.session.add(loan_type)
    db.session.flush()
    log_activity(current_user, 'Create', 'LoanType', loan_type.id,
                 description=f'Added loan type {name} at {loan_type.interest_rate}% per month',
                 status_code=201)
    db.session.commit()

    return api_response(loan_type.to_dict(), 'Loan type created successfully', 201)

@loans_bp.route('', methods=['GET'])
@login_required
def list_loans():
    """Admins see every loan, members their own"""
    query = Loan.query
    user_id = scoped_user_id()
    if user_id is not None:
        query = query.filter_by(user_id=user_id)

    status = request.args.get('status', '')
    if status:
        query = query.filter(db.func.lower(Loan.status) == status.lower())

    today = date.today()
    loans = query.order_by(Loan.date.desc(), Loan.id.desc()).all()
    return api_response([loan.to_dict(today) for loan in loans])

@loans_bp.route('/<int:id>', methods=['GET'])
@login_required
def view_loan(id):
    """View loan"""
    loan = get_visible_loan(id)
    return api_response(loan.to_dict())

@loans_bp.route('', methods=['POST'])
@login_required
@admin_required
def add_loan():
    """Issue a loan"""
    form = LoanForm.from_json()
    if not form.validate():
        return api_error('Invalid loan details', 400, form_errors(form))

    error = _check_references(form)
    if error:
        return log_failure(current_user, 'Create', 'Loan', error, 400)

    loan = Loan()
    _apply_form(loan, form)
    db.session.add(loan)
    db.session.flush()

    log_activity(current_user, 'Create', 'Loan', loan.id,
                 description=f'Issued loan of {loan.amount} to user {loan.user_id}',
                 details={'amount': loan.amount, 'due_date': loan.due_date, 'loan_type_id': loan.loan_type_id},
                 status_code=201)
    db.session.commit()
    logger.info('Loan %s issued to member %s', loan.id, loan.user_id)

    return api_response(loan.to_dict(), 'Loan created successfully', 201)

@loans_bp.route('/<int:id>', methods=['PUT'])
@login_required
@admin_required
def edit_loan(id):
    """Edit loan"""
    loan = db.get_or_404(Loan, id, description='Loan not found')
    form = LoanForm.from_json()
    if not form.validate():
        return api_error('Invalid loan details', 400, form_errors(form))

    error = _check_references(form)
    if error:
        return log_failure(current_user, 'Update', 'Loan', error, 400, entity_id=loan.id)

    _apply_form(loan, form)
    log_activity(current_user, 'Update', 'Loan', loan.id,
                 description=f'Updated loan {loan.id}', status_code=200)
    db.session.commit()

    return api_response(loan.to_dict(), 'Loan updated successfully')

@loans_bp.route('/<int:id>', methods=['DELETE'])
@login_required
@admin_required
def delete_loan(id):
    """Delete loan"""
    loan = db.get_or_404(Loan, id, description='Loan not found')
    LoanRequest.query.filter_by(loan_id=loan.id).update({'loan_id': None})
    db.session.delete(loan)
    log_activity(current_user, 'Delete', 'Loan', id,
                 description=f'Deleted loan {id}', status_code=200)
    db.session.commit()
    return api_response(None, 'Loan deleted successfully')

@loans_bp.route('/repayment', methods=['POST'])
@login_required
@admin_required
def repay_loan():
    """Close a loan; interest received defaults to the interest owed at closing"""
    form = RepaymentForm.from_json()
    if not form.validate():
        return api_error('Invalid repayment details', 400, form_errors(form))

    loan = db.session.get(Loan, form.loan_id.data)
    if loan is None:
        return api_error('Loan not found', 404)
    if loan.is_closed:
        return log_failure(current_user, 'Repayment', 'Loan', 'Loan is already closed', 409, entity_id=loan.id)

    closed_date = form.closed_date.data or date.today()
    if closed_date < loan.date:
        return api_error('Closed date cannot be before the issue date', 400)

    interest_due = loan.interest_as_of(closed_date)
    interest_received = form.interest_received.data
    if interest_received is None:
        interest_received = interest_due

    loan.closed_date = closed_date
    loan.status = Loan.STATUS_CLOSED
    loan.interest_received = interest_received

    log_activity(current_user, 'Repayment', 'Loan', loan.id,
                 description=f'Loan {loan.id} repaid on {closed_date}',
                 details={'interest_due': interest_due, 'interest_received': interest_received},
                 status_code=200)
    db.session.commit()
    logger.info('Loan %s closed with interest %s', loan.id, interest_received)

    return api_response(loan.to_dict(), 'Loan repaid successfully')

@loans_bp.route('/due')
@login_required
def loans_due():
    """Open loans overdue, due today and due within the week"""
    today = date.today()
    window = current_app.config['DUE_THIS_WEEK_DAYS']
    query = Loan.query.filter(
        Loan.closed_date.is_(None),
        Loan.due_date <= today + timedelta(days=window)
    )
    user_id = scoped_user_id()
    if user_id is not None:
        query = query.filter_by(user_id=user_id)

    buckets = bucket_due_loans(query.order_by(Loan.due_date).all(), today, window)
    return api_response({
        'as_of': today.isoformat(),
        'overdue': bucket_summary(buckets.overdue, today),
        'due_today': bucket_summary(buckets.due_today, today),
        'due_this_week': bucket_summary(buckets.due_this_week, today),
    })

@loans_bp.route('/upcoming')
@login_required
def loans_upcoming():
    """Open loans overdue or falling due soon"""
    today = date.today()
    window = current_app.config['DUE_SOON_DAYS']
    query = Loan.query.filter(Loan.closed_date.is_(None))
    user_id = scoped_user_id()
    if user_id is not None:
        query = query.filter_by(user_id=user_id)

    loans = due_soon_loans(query.order_by(Loan.due_date).all(), today, window)
    data = bucket_summary(loans, today)
    data['as_of'] = today.isoformat()
    data['window_days'] = window
    return api_response(data)
