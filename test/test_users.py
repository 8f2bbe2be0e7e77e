"""
Member management by the group's office bearers
"""
from datetime import date, timedelta
from shg import db
from shg.models import ActivityLog, LoanRequest, User

def test_health_needs_no_login(client, member):
    response = client.get('/api/users/health')
    assert response.status_code == 200
    assert response.get_json()['data']['user_count'] == 1

def test_secretary_adds_member_with_default_login(app, client, secretary):
    response = client.post('/api/users', headers=secretary.headers, json={
        'name': 'Rani',
        'email': 'Rani@Example.com',
        'phone': '0771234567',
        'joining_date': '2024-01-15T00:00:00Z',
    })
    body = response.get_json()

    assert response.status_code == 201
    assert body['data']['role'] == 'member'
    assert body['data']['joining_date'] == '2024-01-15'
    assert body['data']['is_active'] is True

    login = client.post('/api/auth/login', json={'username': 'rani@example.com', 'password': 'password1'})
    assert login.status_code == 200

def test_duplicate_email_is_rejected(client, secretary, member):
    response = client.post('/api/users', headers=secretary.headers, json={
        'name': 'Copy', 'email': 'MALA@example.com'
    })
    assert response.status_code == 400
    assert 'already exists' in response.get_json()['message']

def test_role_is_case_insensitive_and_validated(client, secretary):
    ok = client.post('/api/users', headers=secretary.headers, json={
        'name': 'Pria', 'email': 'pria@example.com', 'role': 'President'
    })
    assert ok.status_code == 201
    assert ok.get_json()['data']['role'] == 'president'

    bad = client.post('/api/users', headers=secretary.headers, json={
        'name': 'Bad', 'email': 'bad@example.com', 'role': 'chairman'
    })
    assert bad.status_code == 400

def test_update_member(client, secretary, member):
    response = client.put(f'/api/users/{member.id}', headers=secretary.headers, json={
        'name': 'Mala Perera', 'email': 'mala@example.com', 'inactive_date': '2024-06-30', 'is_active': False
    })
    data = response.get_json()['data']

    assert response.status_code == 200
    assert data['name'] == 'Mala Perera'
    assert data['inactive_date'] == '2024-06-30'
    assert data['is_active'] is False

def test_delete_member(app, client, secretary, member):
    response = client.delete(f'/api/users/{member.id}', headers=secretary.headers)
    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(User, member.id) is None

def test_deleting_officer_keeps_processed_requests(app, client, secretary, treasurer, member):
    due = (date.today() + timedelta(days=30)).isoformat()
    request_id = client.post('/api/loan-requests', headers=member.headers,
                             json={'amount': 1000, 'due_date': due}).get_json()['data']['id']
    client.put(f'/api/loan-requests/{request_id}/action', headers=treasurer.headers, json={'action': 'rejected'})

    # the applicant still has a request on file
    assert client.delete(f'/api/users/{member.id}', headers=secretary.headers).status_code == 409

    response = client.delete(f'/api/users/{treasurer.id}', headers=secretary.headers)
    assert response.status_code == 200

    with app.app_context():
        assert db.session.get(User, treasurer.id) is None
        loan_request = db.session.get(LoanRequest, request_id)
        assert loan_request.status == 'Rejected'
        assert loan_request.processed_by_id is None
        assert ActivityLog.query.filter_by(user_id=treasurer.id).count() == 0
        assert ActivityLog.query.filter_by(user_name='Tara Treasurer').count() >= 1

def test_unknown_member_is_404(client, secretary):
    response = client.get('/api/users/999', headers=secretary.headers)
    assert response.status_code == 404
    assert response.get_json()['message'] == 'User not found'
