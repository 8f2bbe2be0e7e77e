"""
Due buckets over open loans: overdue / due today / due this week
"""
from datetime import date, timedelta
from types import SimpleNamespace
from shg.interest import bucket_due_loans, due_soon_loans

TODAY = date(2024, 3, 15)

def make_loan(offset_days, status='active', closed_date=None):
    return SimpleNamespace(due_date=TODAY + timedelta(days=offset_days), status=status, closed_date=closed_date)

def test_each_loan_lands_in_one_bucket():
    overdue = make_loan(-3)
    today = make_loan(0)
    this_week = make_loan(7)
    later = make_loan(8)

    buckets = bucket_due_loans([overdue, today, this_week, later], TODAY)

    assert buckets.overdue == [overdue]
    assert buckets.due_today == [today]
    assert buckets.due_this_week == [this_week]

def test_closed_loans_are_excluded():
    by_status = make_loan(-5, status='Closed')
    by_date = make_loan(-5, closed_date=TODAY - timedelta(days=1))

    buckets = bucket_due_loans([by_status, by_date], TODAY)

    assert buckets == ([], [], [])

def test_buckets_partition_open_loans_within_a_week():
    loans = [make_loan(offset) for offset in range(-20, 21)]
    loans.append(make_loan(-2, status='closed'))

    buckets = bucket_due_loans(loans, TODAY)
    combined = buckets.overdue + buckets.due_today + buckets.due_this_week
    expected = [loan for loan in loans
                if loan.status != 'closed' and loan.due_date <= TODAY + timedelta(days=7)]

    assert len(combined) == len({id(loan) for loan in combined})
    assert sorted(map(id, combined)) == sorted(map(id, expected))

def test_due_soon_covers_overdue_and_two_weeks():
    overdue = make_loan(-30)
    soon = make_loan(14)
    too_late = make_loan(15)
    closed = make_loan(2, status='closed')

    assert due_soon_loans([overdue, soon, too_late, closed], TODAY) == [overdue, soon]
