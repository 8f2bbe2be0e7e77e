"""Loan interest and due-status calculations

Simple (non-compounding) interest on a monthly rate, using a 30-day month.
Shared by every view that reports interest or due dates.
"""
from collections import namedtuple
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

DAYS_PER_MONTH = Decimal('30')
CENTS = Decimal('0.01')
CLOSED = 'closed'

DueStatus = namedtuple('DueStatus', ['is_overdue', 'days_overdue', 'days_until_due'])
DueBuckets = namedtuple('DueBuckets', ['overdue', 'due_today', 'due_this_week'])


class InvalidArgument(ValueError):
    """Raised for inputs that would produce negative interest"""


def to_date(value):
    """Drop the time-of-day from a datetime; dates pass through unchanged"""
    if isinstance(value, datetime):
        return value.date()
    return value


def to_decimal(value):
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_interest(monthly_rate_percent, principal, issue_date, as_of_date):
    """Simple interest owed on ``principal`` from ``issue_date`` to ``as_of_date``.

    ``monthly_rate_percent`` is in percentage points per 30-day month, so
    ``2.5`` means 2.5% a month. Day 31 counts as 31/30 months, not as the
    start of a second month. Returns a Decimal rounded half-up to cents;
    zero when ``as_of_date`` is on or before ``issue_date``.
    """
    rate = to_decimal(monthly_rate_percent)
    principal = to_decimal(principal)
    if rate < 0:
        raise InvalidArgument(f'Interest rate cannot be negative: {rate}')
    if principal < 0:
        raise InvalidArgument(f'Principal cannot be negative: {principal}')

    issue_date = to_date(issue_date)
    as_of_date = to_date(as_of_date)
    if as_of_date <= issue_date:
        return Decimal('0.00')

    days_elapsed = (as_of_date - issue_date).days
    months_elapsed = Decimal(days_elapsed) / DAYS_PER_MONTH
    interest = principal * rate / Decimal('100') * months_elapsed
    return interest.quantize(CENTS, rounding=ROUND_HALF_UP)


def is_closed_status(status):
    return (status or '').strip().lower() == CLOSED


def classify_due_status(due_date, status, today=None):
    """Overdue flag and day counts for a loan relative to ``today``.

    Closed loans are never overdue. ``days_overdue`` goes negative before the
    due date, while ``days_until_due`` floors at zero once it has passed.
    """
    if is_closed_status(status):
        return DueStatus(False, 0, 0)

    today = to_date(today) or date.today()
    due_date = to_date(due_date)
    days_overdue = (today - due_date).days
    days_until_due = (due_date - today).days if due_date >= today else 0
    return DueStatus(days_overdue > 0, days_overdue, days_until_due)


def is_open_loan(loan):
    return loan.closed_date is None and not is_closed_status(loan.status)


def bucket_due_loans(loans, today=None, window_days=7):
    """Split open loans into overdue, due today and due within ``window_days``.

    The buckets never overlap; loans due later than the window, and closed
    loans, are left out.
    """
    today = to_date(today) or date.today()
    horizon = today + timedelta(days=window_days)
    overdue, due_today, due_this_week = [], [], []

    for loan in loans:
        if not is_open_loan(loan):
            continue
        due_date = to_date(loan.due_date)
        if due_date < today:
            overdue.append(loan)
        elif due_date == today:
            due_today.append(loan)
        elif due_date <= horizon:
            due_this_week.append(loan)

    return DueBuckets(overdue, due_today, due_this_week)


def due_soon_loans(loans, today=None, window_days=14):
    """Open loans that are overdue or fall due within ``window_days``"""
    today = to_date(today) or date.today()
    horizon = today + timedelta(days=window_days)
    return [loan for loan in loans
            if is_open_loan(loan) and to_date(loan.due_date) <= horizon]
