# tests/test_admin_api.py
import pytest

from skillswap import db, storage


@pytest.fixture
def admin(make_user, auth_headers):
    make_user('admin', is_admin=True)
    return auth_headers('admin')


def test_non_admin_is_denied(client, make_user, auth_headers):
    make_user('alice')

    response = client.get('/api/admin/users', headers=auth_headers('alice'))

    assert response.status_code == 403
    assert response.get_json() == {'message': 'Access denied'}


def test_admin_routes_require_token(client):
    assert client.get('/api/admin/users').status_code == 401


def test_revoked_admin_loses_access(client, admin):
    assert client.get('/api/admin/users', headers=admin).status_code == 200

    storage.update_user_profile('admin', {'is_admin': False})

    assert client.get('/api/admin/users', headers=admin).status_code == 403


def test_list_users_includes_private(client, admin, make_user):
    make_user('hidden', is_public=False)

    ids = {user['id'] for user in client.get('/api/admin/users', headers=admin).get_json()}

    assert ids == {'admin', 'hidden'}


def test_ban_and_unban(client, admin, make_user):
    make_user('spammer', location='Berlin')

    response = client.post('/api/admin/ban-user', headers=admin, json={'userId': 'spammer', 'reason': 'Spam'})
    assert response.status_code == 200
    assert client.get('/api/users?search=berlin').get_json()['users'] == []

    response = client.post('/api/admin/unban-user', headers=admin, json={'userId': 'spammer'})
    assert response.status_code == 200
    assert [user['id'] for user in client.get('/api/users?search=berlin').get_json()['users']] == ['spammer']

    actions = client.get('/api/admin/actions', headers=admin).get_json()
    assert [action['action'] for action in actions] == ['unban_user', 'ban_user']
    assert actions[1]['reason'] == 'Spam'
    assert actions[1]['adminId'] == 'admin'


def test_ban_validation(client, admin):
    assert client.post('/api/admin/ban-user', headers=admin, json={}).status_code == 400
    assert client.post('/api/admin/ban-user', headers=admin, json={'userId': 'ghost'}).status_code == 404


def test_skill_moderation(client, admin, make_user, skills):
    guitar, piano = skills
    make_user('alice')
    storage.add_user_skill_offered('alice', guitar.id)

    assert client.post(f"/api/admin/skills/{piano.id}/approve", headers=admin).status_code == 200
    response = client.post(f"/api/admin/skills/{guitar.id}/reject", headers=admin, json={'reason': 'Duplicate'})
    assert response.status_code == 200

    assert [skill['name'] for skill in client.get('/api/admin/skills', headers=admin).get_json()] == ['Piano']
    assert [skill['name'] for skill in client.get('/api/skills').get_json()] == ['Piano']
    assert client.get('/api/users/alice').get_json()['skillsOffered'] == []

    actions = client.get('/api/admin/actions', headers=admin).get_json()
    assert [(action['action'], action['targetId']) for action in actions] == [
        ('reject_skill', str(guitar.id)),
        ('approve_skill', str(piano.id)),
    ]


def test_moderating_missing_skill(client, admin):
    assert client.post('/api/admin/skills/404/approve', headers=admin).status_code == 404
    assert client.post('/api/admin/skills/404/reject', headers=admin).status_code == 404


def test_all_swap_requests(client, admin, make_user, skills):
    guitar, piano = skills
    make_user('alice')
    make_user('bob')
    storage.create_swap_request({
        'requester_id': 'alice',
        'recipient_id': 'bob',
        'offered_skill_id': guitar.id,
        'wanted_skill_id': piano.id,
    })

    body = client.get('/api/admin/swap-requests', headers=admin).get_json()

    assert len(body) == 1
    assert body[0]['requester']['id'] == 'alice'
    assert body[0]['recipient']['id'] == 'bob'


def test_platform_messages(client, admin):
    response = client.post('/api/admin/platform-message', headers=admin, json={
        'title': 'Maintenance',
        'content': 'Down for an hour on Sunday',
    })
    assert response.status_code == 200
    message = response.get_json()
    assert message['isActive'] is True

    public = client.get('/api/platform-messages').get_json()
    assert [item['title'] for item in public] == ['Maintenance']

    response = client.put(f"/api/admin/platform-message/{message['id']}/deactivate", headers=admin)
    assert response.status_code == 200
    assert client.get('/api/platform-messages').get_json() == []

    db.session.expire_all()
    assert [action.action for action in storage.get_admin_actions()] == ['deactivate_message', 'send_message']


def test_platform_message_validation(client, admin):
    response = client.post('/api/admin/platform-message', headers=admin, json={'title': 'No content'})

    assert response.status_code == 400
    assert client.put('/api/admin/platform-message/99/deactivate', headers=admin).status_code == 404
