"""
Dashboard summary and paginated meetings
"""
from datetime import date, timedelta
from decimal import Decimal
from shg import db
from shg.models import Meeting, MeetingPayment, Loan

def seed_meetings(app, user_id, count):
    with app.app_context():
        for i in range(count):
            meeting = Meeting(date=date(2024, 1, 1) + timedelta(days=7 * i), description=f'Week {i + 1}')
            db.session.add(meeting)
            db.session.flush()
            db.session.add(MeetingPayment(user_id=user_id, meeting_id=meeting.id,
                                          main_payment=Decimal('100.00'), weekly_payment=Decimal('10.00')))
        db.session.commit()

def test_summary(app, client, secretary, member):
    seed_meetings(app, member.id, 3)
    today = date.today()
    with app.app_context():
        db.session.add(Loan(user_id=member.id, amount=Decimal('5000'), date=today - timedelta(days=60),
                            due_date=today - timedelta(days=1)))
        db.session.add(Loan(user_id=member.id, amount=Decimal('3000'), date=today - timedelta(days=60),
                            due_date=today - timedelta(days=30), closed_date=today - timedelta(days=30),
                            status='closed', interest_received=Decimal('45.00')))
        db.session.commit()

    data = client.get('/api/dashboard/summary', headers=member.headers).get_json()['data']

    assert data['total_meetings'] == 3
    assert data['total_payment'] == 330.0
    assert data['total_eligible_users'] == 2
    assert data['total_loans'] == 2
    assert data['total_loan_amount'] == 8000.0
    assert data['total_interest_received'] == 45.0
    assert data['overdue_loans'] == 1
    assert len(data['recent_meetings']) == 3

def test_summary_date_filter(app, client, member):
    seed_meetings(app, member.id, 4)
    data = client.get('/api/dashboard/summary?start_date=2024-01-08&end_date=2024-01-15',
                      headers=member.headers).get_json()['data']
    assert data['total_meetings'] == 2
    assert data['total_main_payment'] == 200.0

def test_reversed_date_range(client, member):
    response = client.get('/api/dashboard/summary?start_date=2024-02-01&end_date=2024-01-01', headers=member.headers)
    assert response.status_code == 400

def test_meetings_are_paginated_with_overall_totals(app, client, member):
    seed_meetings(app, member.id, 12)

    data = client.get('/api/dashboard/meetings?page=2&page_size=5', headers=member.headers).get_json()['data']

    assert data['page'] == 2
    assert data['total_count'] == 12
    assert data['total_pages'] == 3
    assert len(data['items']) == 5
    assert data['totals']['total_main_payment'] == 1200.0
    assert data['items'][0]['total_payment'] == 110.0

def test_page_size_is_capped(app, client, member):
    seed_meetings(app, member.id, 1)
    data = client.get('/api/dashboard/meetings?page_size=1000', headers=member.headers).get_json()['data']
    assert data['page_size'] == 100
