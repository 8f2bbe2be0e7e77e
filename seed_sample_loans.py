#!/usr/bin/env python3
"""Create one open loan in each due bucket for manual testing"""

import sys
from datetime import date, timedelta
from decimal import Decimal
from shg import create_app, db
from shg.models import Loan, LoanType, User, Role
from shg.interest import bucket_due_loans

app = create_app('development')
with app.app_context():
    db.create_all()

    member = User.query.filter_by(role=Role.MEMBER.value, is_active=True).first()
    loan_type = LoanType.query.first()

    if not member or not loan_type:
        print('Missing required data: need an active member and a loan type')
        print('Run "python run.py seed-loan-types" and add a member first')
        sys.exit(1)

    print(f'Using member: {member.name}')
    print(f'Using loan type: {loan_type.name} ({loan_type.interest_rate}% per month)')

    today = date.today()
    samples = [
        ('overdue', today - timedelta(days=90), today - timedelta(days=10)),
        ('due today', today - timedelta(days=60), today),
        ('due this week', today - timedelta(days=30), today + timedelta(days=4)),
        ('due later', today - timedelta(days=5), today + timedelta(days=45)),
    ]

    loans = []
    for label, issued, due in samples:
        loan = Loan(
            user_id=member.id,
            loan_type_id=loan_type.id,
            amount=Decimal('25000.00'),
            date=issued,
            due_date=due,
            loan_term=max((due - issued).days // 30, 1),
            status=Loan.STATUS_ACTIVE
        )
        db.session.add(loan)
        loans.append(loan)
        print(f'- {label}: issued {issued}, due {due}')

    db.session.commit()

    buckets = bucket_due_loans(loans, today)
    print(f'\nOverdue: {len(buckets.overdue)}')
    print(f'Due today: {len(buckets.due_today)}')
    print(f'Due this week: {len(buckets.due_this_week)}')
    for loan in loans:
        print(f'  Loan {loan.id}: interest to date {loan.interest_amount()}')
