"""
Meetings, attendance, savings payments and the attendance summary
"""
from datetime import date, timedelta

def create_meeting(client, headers, day='2024-05-05', description='May meeting'):
    response = client.post('/api/meetings', headers=headers, json={
        'date': day, 'time': '10:00', 'description': description, 'location': 'Temple hall'
    })
    assert response.status_code == 201
    return response.get_json()['data']['id']

def test_meeting_crud(client, secretary, member):
    meeting_id = create_meeting(client, secretary.headers)

    listed = client.get('/api/meetings', headers=member.headers).get_json()['data']
    assert [m['id'] for m in listed] == [meeting_id]

    updated = client.put(f'/api/meetings/{meeting_id}', headers=secretary.headers, json={
        'date': '2024-05-06', 'description': 'May meeting (moved)'
    })
    assert updated.status_code == 200
    assert updated.get_json()['data']['date'] == '2024-05-06'

    assert client.delete(f'/api/meetings/{meeting_id}', headers=secretary.headers).status_code == 200
    assert client.get(f'/api/meetings/{meeting_id}', headers=secretary.headers).status_code == 404

def test_member_cannot_create_meeting(client, member):
    response = client.post('/api/meetings', headers=member.headers, json={'date': '2024-05-05', 'description': 'x'})
    assert response.status_code == 403

def test_invalid_meeting_date(client, secretary):
    response = client.post('/api/meetings', headers=secretary.headers, json={'date': 'someday', 'description': 'x'})
    assert response.status_code == 400

def test_minutes(client, secretary):
    meeting_id = create_meeting(client, secretary.headers)
    saved = client.post('/api/meetings/minutes', headers=secretary.headers, json={
        'meeting_id': meeting_id, 'minutes': 'Agreed to raise weekly savings.'
    })
    assert saved.status_code == 200

    minutes = client.get(f'/api/meetings/{meeting_id}/minutes', headers=secretary.headers).get_json()['data']
    assert minutes['minutes'] == 'Agreed to raise weekly savings.'

def test_duplicate_attendance_is_rejected(client, secretary, member):
    meeting_id = create_meeting(client, secretary.headers)
    payload = {'user_id': member.id, 'meeting_id': meeting_id, 'is_present': True}

    assert client.post('/api/attendance', headers=secretary.headers, json=payload).status_code == 201
    second = client.post('/api/attendance', headers=secretary.headers, json=payload)
    assert second.status_code == 400

def test_attendance_for_unknown_member(client, secretary):
    meeting_id = create_meeting(client, secretary.headers)
    response = client.post('/api/attendance', headers=secretary.headers,
                           json={'user_id': 999, 'meeting_id': meeting_id, 'is_present': True})
    assert response.status_code == 400

def test_bulk_attendance_replaces_meeting_rows(client, secretary, member, other_member):
    meeting_id = create_meeting(client, secretary.headers)
    client.post('/api/attendance', headers=secretary.headers,
                json={'user_id': member.id, 'meeting_id': meeting_id, 'is_present': False})

    response = client.post('/api/attendance/bulk', headers=secretary.headers, json={
        'meeting_id': meeting_id,
        'attendances': [
            {'user_id': member.id, 'is_present': True},
            {'user_id': other_member.id, 'is_present': False},
        ]
    })
    assert response.status_code == 200

    rows = client.get(f'/api/attendance/meeting/{meeting_id}', headers=secretary.headers).get_json()['data']
    assert {(r['user_id'], r['is_present']) for r in rows} == {(member.id, True), (other_member.id, False)}

def test_payment_for_same_member_and_meeting_updates(client, secretary, member):
    meeting_id = create_meeting(client, secretary.headers)
    payload = {'user_id': member.id, 'meeting_id': meeting_id, 'main_payment': 500, 'weekly_payment': 100}

    first = client.post('/api/payments', headers=secretary.headers, json=payload)
    assert first.status_code == 201

    payload['main_payment'] = 750
    second = client.post('/api/payments', headers=secretary.headers, json=payload)
    assert second.status_code == 200
    assert second.get_json()['data']['id'] == first.get_json()['data']['id']
    assert second.get_json()['data']['total_payment'] == 850.0

def test_negative_payment_is_rejected(client, secretary, member):
    meeting_id = create_meeting(client, secretary.headers)
    response = client.post('/api/payments', headers=secretary.headers, json={
        'user_id': member.id, 'meeting_id': meeting_id, 'main_payment': -1, 'weekly_payment': 0
    })
    assert response.status_code == 400

def test_bulk_payments_and_details(client, secretary, member, other_member):
    meeting_id = create_meeting(client, secretary.headers)
    response = client.post('/api/payments/bulk', headers=secretary.headers, json={
        'meeting_id': meeting_id,
        'payments': [
            {'user_id': member.id, 'main_payment': 1000, 'weekly_payment': 50},
            {'user_id': other_member.id, 'main_payment': '250.50', 'weekly_payment': 0},
        ]
    })
    assert response.status_code == 200
    assert response.get_json()['data']['total_payment'] == 1300.5

    details = client.get(f'/api/meetings/{meeting_id}/details', headers=member.headers).get_json()['data']
    assert len(details['payments']) == 2
    assert details['total_main_payment'] == 1250.5
    assert details['total_weekly_payment'] == 50.0

def test_bulk_payments_reject_unknown_member(client, secretary, member):
    meeting_id = create_meeting(client, secretary.headers)
    response = client.post('/api/payments/bulk', headers=secretary.headers, json={
        'meeting_id': meeting_id,
        'payments': [{'user_id': 4242, 'main_payment': 10, 'weekly_payment': 0}]
    })
    assert response.status_code == 400

def test_comprehensive_summary(client, secretary, make_member):
    meeting_day = date.today() - timedelta(days=10)
    present = make_member('Present', 'present@example.com')
    absent = make_member('Absent', 'absent@example.com')
    make_member('Newcomer', 'new@example.com', joining_date=date.today())
    make_member('Left', 'left@example.com', inactive_date=meeting_day - timedelta(days=1))

    meeting_id = create_meeting(client, secretary.headers, day=meeting_day.isoformat())
    client.post('/api/attendance', headers=secretary.headers,
                json={'user_id': present.id, 'meeting_id': meeting_id, 'is_present': True})

    summary = client.get(f'/api/meetings/{meeting_id}/comprehensive-summary',
                         headers=secretary.headers).get_json()['data']
    stats = summary['attendance_stats']

    # secretary, present and absent are eligible; the newcomer and the leaver are not
    assert stats['total_eligible_users'] == 3
    assert stats['attended_count'] == 1
    assert stats['attendance_percentage'] == 33.33
    assert {u['user_id'] for u in summary['absent_users']} == {secretary.id, absent.id}
    assert all(u['absence_reason'] == 'Absent without specific reason' for u in summary['absent_users'])

def test_summaries(client, secretary, member):
    meeting_id = create_meeting(client, secretary.headers)
    client.post('/api/attendance', headers=secretary.headers,
                json={'user_id': member.id, 'meeting_id': meeting_id, 'is_present': True})

    summary = client.get(f'/api/meetings/{meeting_id}/summary', headers=member.headers).get_json()['data']
    assert summary['present_count'] == 1
    assert summary['absent_count'] == 0

    summaries = client.get('/api/meetings/summaries', headers=member.headers).get_json()['data']
    assert len(summaries) == 1
