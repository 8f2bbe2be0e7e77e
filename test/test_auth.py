"""
Login, bearer tokens and role checks
"""
from shg.models import Role, ActivityLog

def test_login_returns_token_and_user(client, secretary):
    response = client.post('/api/auth/login', json={'username': 'secretary@example.com', 'password': 'secret123'})
    body = response.get_json()

    assert response.status_code == 200
    assert body['success'] is True
    assert body['data']['token']
    assert body['data']['user'] == {
        'id': secretary.id, 'name': 'Sita Secretary',
        'email': 'secretary@example.com', 'role': 'secretary'
    }

def test_token_from_login_authenticates(client, member):
    token = client.post('/api/auth/login', json={
        'username': 'MALA@example.com', 'password': 'secret123'
    }).get_json()['data']['token']

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    assert response.get_json()['data']['email'] == 'mala@example.com'

def test_wrong_password_is_rejected_and_logged(app, client, member):
    response = client.post('/api/auth/login', json={'username': 'mala@example.com', 'password': 'nope'})

    assert response.status_code == 401
    assert response.get_json()['success'] is False
    with app.app_context():
        entry = ActivityLog.query.filter_by(action='Login').one()
        assert entry.is_success is False
        assert entry.status_code == 401

def test_inactive_member_cannot_log_in(client, make_member):
    make_member('Gone Member', 'gone@example.com', is_active=False)
    response = client.post('/api/auth/login', json={'username': 'gone@example.com', 'password': 'secret123'})
    assert response.status_code == 401

def test_missing_credentials(client):
    response = client.post('/api/auth/login', json={'username': 'someone'})
    assert response.status_code == 400
    assert response.get_json()['errors']

def test_requests_without_token_get_401(client):
    response = client.get('/api/meetings')
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Authentication required'

def test_garbage_token_gets_401(client, member):
    response = client.get('/api/meetings', headers={'Authorization': 'Bearer not-a-token'})
    assert response.status_code == 401

def test_member_cannot_use_admin_endpoint(client, member):
    response = client.get('/api/users', headers=member.headers)
    assert response.status_code == 403

def test_admin_roles():
    assert Role.SECRETARY.is_admin_role()
    assert Role.PRESIDENT.is_admin_role()
    assert Role.TREASURER.is_admin_role()
    assert not Role.MEMBER.is_admin_role()
    assert Role.parse('Treasurer') is Role.TREASURER
    assert Role.parse('TREASURER') is Role.TREASURER
    assert Role.parse('chairman') is None

def test_change_password(client, member):
    response = client.post('/api/auth/change-password', headers=member.headers, json={
        'current_password': 'secret123', 'new_password': 'newsecret', 'confirm_password': 'newsecret'
    })
    assert response.status_code == 200

    login = client.post('/api/auth/login', json={'username': 'mala@example.com', 'password': 'newsecret'})
    assert login.status_code == 200
