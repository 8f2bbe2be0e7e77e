"""
Interest and due-status rules: simple interest on a monthly rate over 30-day months
"""
from datetime import date, datetime
from decimal import Decimal
import pytest
from shg.interest import compute_interest, classify_due_status, InvalidArgument

def test_thirty_days_is_one_month():
    interest = compute_interest(Decimal('2.5'), Decimal('10000'), date(2024, 1, 1), date(2024, 1, 31))
    assert interest == Decimal('250.00')

def test_forty_five_days_is_one_and_a_half_months():
    interest = compute_interest(Decimal('1.16'), Decimal('5000'), date(2024, 1, 1), date(2024, 2, 15))
    assert interest == Decimal('87.00')

def test_day_thirty_one_accrues_fractionally():
    # 10000 * 3% * 31/30 = 310.00
    interest = compute_interest(3, 10000, date(2024, 1, 1), date(2024, 2, 1))
    assert interest == Decimal('310.00')

def test_no_interest_on_or_before_issue_date():
    issued = date(2024, 3, 10)
    assert compute_interest(2, 10000, issued, issued) == Decimal('0.00')
    assert compute_interest(2, 10000, issued, date(2024, 3, 1)) == Decimal('0.00')

def test_result_has_two_decimal_places():
    interest = compute_interest(Decimal('1.5'), Decimal('333.33'), date(2024, 1, 1), date(2024, 1, 8))
    # 333.33 * 0.015 * 7/30 = 1.1666...
    assert interest == Decimal('1.17')
    assert interest.as_tuple().exponent == -2

def test_rounds_half_up():
    # 100 * 1% * 15/30 = 0.50 exactly; 1 * 1% * 15/30 = 0.005 -> 0.01
    assert compute_interest(1, 100, date(2024, 1, 1), date(2024, 1, 16)) == Decimal('0.50')
    assert compute_interest(1, 1, date(2024, 1, 1), date(2024, 1, 16)) == Decimal('0.01')

def test_zero_rate_means_zero_interest():
    assert compute_interest(0, 50000, date(2024, 1, 1), date(2024, 6, 1)) == Decimal('0.00')

def test_datetimes_are_truncated_to_dates():
    interest = compute_interest(Decimal('2.5'), 10000, datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 31, 0, 1))
    assert interest == Decimal('250.00')

def test_negative_inputs_are_rejected():
    with pytest.raises(InvalidArgument):
        compute_interest(-1, 1000, date(2024, 1, 1), date(2024, 2, 1))
    with pytest.raises(InvalidArgument):
        compute_interest(1, -1000, date(2024, 1, 1), date(2024, 2, 1))

def test_closed_loan_is_never_overdue():
    status = classify_due_status(date(2024, 1, 10), 'closed', date(2024, 2, 1))
    assert tuple(status) == (False, 0, 0)
    assert tuple(classify_due_status(date(2024, 1, 10), 'Closed', date(2024, 2, 1))) == (False, 0, 0)

def test_overdue_loan():
    status = classify_due_status(date(2024, 1, 10), 'Sanctioned', date(2024, 1, 20))
    assert status.is_overdue is True
    assert status.days_overdue == 10
    assert status.days_until_due == 0

def test_loan_not_yet_due():
    status = classify_due_status(date(2024, 2, 1), 'Sanctioned', date(2024, 1, 20))
    assert tuple(status) == (False, -12, 12)

def test_loan_due_today():
    status = classify_due_status(date(2024, 1, 20), 'active', date(2024, 1, 20))
    assert tuple(status) == (False, 0, 0)
