"""Database models for the self-help group ledger"""
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
import json
from flask import g, request
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from shg import db, login_manager
from shg.interest import compute_interest, classify_due_status, to_date, to_decimal, is_closed_status


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve ``Authorization: Bearer <token>`` to an active member"""
    from shg.utils.tokens import decode_access_token

    header = req.headers.get('Authorization', '')
    if not header.lower().startswith('bearer '):
        return None
    claims = decode_access_token(header.split(None, 1)[1].strip())
    if not claims:
        return None
    user = db.session.get(User, int(claims['sub']))
    if user is None or not user.is_active:
        return None
    return user


class Role(Enum):
    """Member roles; the first three run the group"""
    SECRETARY = 'secretary'
    PRESIDENT = 'president'
    TREASURER = 'treasurer'
    MEMBER = 'member'

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup, ``None`` for unknown names"""
        if isinstance(value, cls):
            return value
        value = (value or '').strip().lower()
        for role in cls:
            if role.value == value:
                return role
        return None

    @classmethod
    def choices(cls):
        return [(role.value, role.value.title()) for role in cls]

    def is_admin_role(self):
        return self in (Role.SECRETARY, Role.PRESIDENT, Role.TREASURER)


class User(UserMixin, db.Model):
    """Group member; members with an admin role manage the books"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(255))
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20))
    username = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.MEMBER.value)
    joining_date = db.Column(db.Date)
    inactive_date = db.Column(db.Date)
    is_active = db.Column(db.Boolean, default=True)
    last_login = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    loans = db.relationship('Loan', foreign_keys='Loan.user_id', backref='user', lazy='dynamic')
    loan_requests = db.relationship('LoanRequest', foreign_keys='LoanRequest.user_id', backref='user', lazy='dynamic')
    attendances = db.relationship('Attendance', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    payments = db.relationship('MeetingPayment', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def role_enum(self):
        return Role.parse(self.role) or Role.MEMBER

    @property
    def is_admin(self):
        return self.role_enum.is_admin_role()

    def absence_reason(self, day):
        day = to_date(day)
        if not self.is_active:
            return 'User is currently inactive'
        if self.joining_date is None:
            return 'User has no joining date recorded'
        if self.joining_date > day:
            return 'User had not joined yet at meeting date'
        if self.inactive_date is not None and self.inactive_date <= day:
            return 'User was inactive at meeting date'
        return 'Absent without specific reason'

    @staticmethod
    def eligible_on(day):
        """Query of members eligible for a meeting held on ``day``"""
        return User.query.filter(
            User.joining_date.isnot(None),
            User.joining_date <= day,
            db.or_(User.inactive_date.is_(None), User.inactive_date > day)
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'email': self.email,
            'phone': self.phone,
            'username': self.username,
            'role': self.role_enum.value,
            'joining_date': _iso(self.joining_date),
            'inactive_date': _iso(self.inactive_date),
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
        }

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'email': self.email, 'role': self.role_enum.value}

    def __repr__(self):
        return f'<User {self.username}>'


class Meeting(db.Model):
    """Group meeting"""
    __tablename__ = 'meetings'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    time = db.Column(db.String(20))
    description = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255))
    minutes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    attendances = db.relationship('Attendance', backref='meeting', lazy='dynamic', cascade='all, delete-orphan')
    payments = db.relationship('MeetingPayment', backref='meeting', lazy='dynamic', cascade='all, delete-orphan')

    def payment_totals(self):
        main_total = Decimal('0')
        weekly_total = Decimal('0')
        for payment in self.payments:
            main_total += to_decimal(payment.main_payment)
            weekly_total += to_decimal(payment.weekly_payment)
        return {
            'total_main_payment': float(main_total),
            'total_weekly_payment': float(weekly_total),
            'total_payment': float(main_total + weekly_total),
        }

    def attendance_counts(self):
        present = self.attendances.filter_by(is_present=True).count()
        total = self.attendances.count()
        return {'present_count': present, 'absent_count': total - present, 'total_attendance': total}

    def to_dict(self, include_minutes=False):
        data = {
            'id': self.id,
            'date': _iso(self.date),
            'time': self.time,
            'description': self.description,
            'location': self.location,
        }
        if include_minutes:
            data['minutes'] = self.minutes or ''
        return data

    def to_details(self):
        data = self.to_dict(include_minutes=True)
        data['attendances'] = [a.to_dict() for a in self.attendances.order_by(Attendance.id)]
        data['payments'] = [p.to_dict() for p in self.payments.order_by(MeetingPayment.id)]
        data.update(self.payment_totals())
        data.update(self.attendance_counts())
        return data

    def __repr__(self):
        return f'<Meeting {self.date} {self.description}>'


class Attendance(db.Model):
    """Attendance of one member at one meeting"""
    __tablename__ = 'attendances'
    __table_args__ = (db.UniqueConstraint('user_id', 'meeting_id', name='uq_attendance_user_meeting'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    meeting_id = db.Column(db.Integer, db.ForeignKey('meetings.id'), nullable=False, index=True)
    is_present = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'meeting_id': self.meeting_id,
            'is_present': self.is_present,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Attendance user={self.user_id} meeting={self.meeting_id}>'


class MeetingPayment(db.Model):
    """Savings paid by a member at a meeting"""
    __tablename__ = 'meeting_payments'
    __table_args__ = (db.UniqueConstraint('user_id', 'meeting_id', name='uq_payment_user_meeting'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    meeting_id = db.Column(db.Integer, db.ForeignKey('meetings.id'), nullable=False, index=True)
    main_payment = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    weekly_payment = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def total(self):
        return to_decimal(self.main_payment) + to_decimal(self.weekly_payment)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'meeting_id': self.meeting_id,
            'main_payment': float(to_decimal(self.main_payment)),
            'weekly_payment': float(to_decimal(self.weekly_payment)),
            'total_payment': float(self.total),
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<MeetingPayment user={self.user_id} meeting={self.meeting_id}>'


class LoanType(db.Model):
    """Named monthly interest rate"""
    __tablename__ = 'loan_types'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    interest_rate = db.Column(db.Numeric(5, 2), nullable=False, default=0)  # Percent per month

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'interest_rate': float(to_decimal(self.interest_rate))}

    def __repr__(self):
        return f'<LoanType {self.name}>'


class Loan(db.Model):
    """Loan issued to a member"""
    __tablename__ = 'loans'

    STATUS_ACTIVE = 'active'
    STATUS_SANCTIONED = 'Sanctioned'
    STATUS_CLOSED = 'closed'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    loan_type_id = db.Column(db.Integer, db.ForeignKey('loan_types.id'))
    amount = db.Column(db.Numeric(15, 2), nullable=False)
    date = db.Column(db.Date, nullable=False, default=date.today)  # Issue date
    due_date = db.Column(db.Date, nullable=False, index=True)
    closed_date = db.Column(db.Date)
    loan_term = db.Column(db.Integer)  # Months
    interest_rate = db.Column(db.Numeric(5, 2))  # Older loans carry their own monthly rate
    interest_received = db.Column(db.Numeric(15, 2), default=0)
    status = db.Column(db.String(30), nullable=False, default=STATUS_ACTIVE)
    cheque_number = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    loan_type = db.relationship('LoanType', backref=db.backref('loans', lazy='dynamic'))

    @property
    def monthly_rate(self):
        """Rate of the loan type, else the rate stored on the loan, else zero"""
        if self.loan_type is not None:
            return to_decimal(self.loan_type.interest_rate)
        return to_decimal(self.interest_rate)

    @property
    def is_closed(self):
        return self.closed_date is not None or is_closed_status(self.status)

    def interest_amount(self, today=None):
        """Interest accrued so far on an open loan; a closed loan stops at its closing date, else its due date"""
        if self.is_closed:
            return self.interest_as_of(self.closed_date or self.due_date)
        return self.interest_as_of(today or date.today())

    def interest_as_of(self, as_of_date):
        return compute_interest(self.monthly_rate, self.amount, self.date, as_of_date)

    def to_dict(self, today=None):
        today = today or date.today()
        interest = self.interest_amount(today)
        due = classify_due_status(self.due_date, self.status, today)
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'loan_type_id': self.loan_type_id,
            'loan_type_name': self.loan_type.name if self.loan_type else None,
            'interest_rate': float(self.monthly_rate),
            'amount': float(to_decimal(self.amount)),
            'date': _iso(self.date),
            'due_date': _iso(self.due_date),
            'closed_date': _iso(self.closed_date),
            'loan_term': self.loan_term,
            'status': self.status,
            'cheque_number': self.cheque_number,
            'interest_amount': float(interest),
            'interest_received': float(to_decimal(self.interest_received)),
            'total_amount': float(to_decimal(self.amount) + interest),
            'days_since_issue': max(((self.closed_date or today) - self.date).days, 0),
            'is_overdue': due.is_overdue,
            'days_overdue': due.days_overdue,
            'days_until_due': due.days_until_due,
        }

    def __repr__(self):
        return f'<Loan {self.id} user={self.user_id}>'


class LoanRequest(db.Model):
    """Member's application for a loan, pending secretary action"""
    __tablename__ = 'loan_requests'

    STATUS_REQUESTED = 'Requested'
    STATUS_ACCEPTED = 'Accepted'
    STATUS_REJECTED = 'Rejected'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    loan_type_id = db.Column(db.Integer, db.ForeignKey('loan_types.id'))
    amount = db.Column(db.Numeric(15, 2), nullable=False)
    date = db.Column(db.Date, nullable=False, default=date.today)
    due_date = db.Column(db.Date, nullable=False)
    loan_term = db.Column(db.Integer)
    description = db.Column(db.Text)
    cheque_number = db.Column(db.String(50))
    status = db.Column(db.String(20), nullable=False, default=STATUS_REQUESTED)
    processed_date = db.Column(db.DateTime)
    processed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    loan_id = db.Column(db.Integer, db.ForeignKey('loans.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    loan_type = db.relationship('LoanType')
    processed_by = db.relationship('User', foreign_keys=[processed_by_id])
    loan = db.relationship('Loan')

    @property
    def is_pending(self):
        return self.status == self.STATUS_REQUESTED

    def to_loan(self):
        """Loan materialised from this request on acceptance"""
        return Loan(
            user_id=self.user_id,
            loan_type_id=self.loan_type_id,
            amount=self.amount,
            date=self.date,
            due_date=self.due_date,
            loan_term=self.loan_term,
            cheque_number=self.cheque_number,
            status=Loan.STATUS_ACTIVE
        )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'loan_type_id': self.loan_type_id,
            'loan_type_name': self.loan_type.name if self.loan_type else None,
            'interest_rate': float(to_decimal(self.loan_type.interest_rate)) if self.loan_type else 0.0,
            'amount': float(to_decimal(self.amount)),
            'date': _iso(self.date),
            'due_date': _iso(self.due_date),
            'loan_term': self.loan_term,
            'description': self.description,
            'cheque_number': self.cheque_number,
            'status': self.status,
            'processed_date': _iso(self.processed_date),
            'processed_by': self.processed_by.name if self.processed_by else None,
            'loan_id': self.loan_id,
        }

    def __repr__(self):
        return f'<LoanRequest {self.id} {self.status}>'


class ActivityLog(db.Model):
    """Activity log for audit trail"""
    __tablename__ = 'activity_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    user_name = db.Column(db.String(200))
    user_role = db.Column(db.String(20))
    action = db.Column(db.String(100), nullable=False, index=True)
    entity_type = db.Column(db.String(50), index=True)  # meeting, loan, payment, etc.
    entity_id = db.Column(db.Integer)
    description = db.Column(db.Text)
    details = db.Column(db.Text)  # JSON
    http_method = db.Column(db.String(10))
    endpoint = db.Column(db.String(255))
    ip_address = db.Column(db.String(50))
    user_agent = db.Column(db.String(255))
    status_code = db.Column(db.Integer)
    is_success = db.Column(db.Boolean, default=True, index=True)
    error_message = db.Column(db.Text)
    duration_ms = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User', backref=db.backref('activities', lazy='dynamic'))

    @classmethod
    def record(cls, user, action, entity_type=None, entity_id=None, description=None,
               details=None, is_success=True, error_message=None, status_code=None):
        """Build an entry for the current request; the caller adds and commits it"""
        started = g.get('request_started_at')
        duration = int((datetime.utcnow() - started).total_seconds() * 1000) if started else None
        return cls(
            user_id=user.id if user else None,
            user_name=user.name if user else None,
            user_role=user.role_enum.value if user else None,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=json.dumps(details, default=str) if details is not None else None,
            http_method=request.method,
            endpoint=request.path,
            ip_address=request.remote_addr,
            user_agent=request.user_agent.string[:255] if request.user_agent else None,
            status_code=status_code,
            is_success=is_success,
            error_message=error_message,
            duration_ms=duration
        )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'user_role': self.user_role,
            'action': self.action,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'description': self.description,
            'details': json.loads(self.details) if self.details else None,
            'http_method': self.http_method,
            'endpoint': self.endpoint,
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
            'status_code': self.status_code,
            'is_success': self.is_success,
            'error_message': self.error_message,
            'duration_ms': self.duration_ms,
            'timestamp': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<ActivityLog {self.action}>'


def _iso(value):
    return value.isoformat() if value else None
