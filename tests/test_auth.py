# tests/test_auth.py
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from skillswap import db, storage

IDENTITY_SECRET = "test-identity-secret"


def id_token(secret=IDENTITY_SECRET, **claims):
    payload = {
        'sub': 'provider-123',
        'email': 'alice@example.com',
        'first_name': 'Alice',
        'last_name': 'Smith',
        'profile_image_url': 'https://images.example.com/alice.png',
        'exp': datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm='HS256')


def test_login_provisions_user(client):
    response = client.post('/api/auth/login', json={'idToken': id_token()})

    assert response.status_code == 200
    body = response.get_json()
    assert body['access_token']
    assert body['user']['id'] == 'provider-123'
    assert body['user']['firstName'] == 'Alice'
    assert body['user']['isPublic'] is True

    db.session.expire_all()
    assert storage.get_user('provider-123').email == 'alice@example.com'


def test_login_accepts_bearer_header(client):
    response = client.post('/api/auth/login', headers={'Authorization': f"Bearer {id_token()}"})

    assert response.status_code == 200


def test_repeat_login_refreshes_claims(client):
    client.post('/api/auth/login', json={'idToken': id_token()})
    storage.update_user_profile('provider-123', {'location': 'Lisbon', 'is_admin': True})

    response = client.post('/api/auth/login', json={'idToken': id_token(first_name='Alicia')})

    user = response.get_json()['user']
    assert user['firstName'] == 'Alicia'
    assert user['location'] == 'Lisbon'
    assert user['isAdmin'] is True


@pytest.mark.parametrize('token', [
    None,
    'not-a-jwt',
    id_token(secret='someone-elses-secret'),
    id_token(exp=datetime.now(timezone.utc) - timedelta(minutes=1)),
    id_token(sub=''),
])
def test_login_rejects_bad_identity_tokens(client, token):
    response = client.post('/api/auth/login', json={'idToken': token})

    assert response.status_code == 401
    assert 'message' in response.get_json()


def test_access_token_reads_current_user(client):
    token = client.post('/api/auth/login', json={'idToken': id_token()}).get_json()['access_token']

    response = client.get('/api/auth/user', headers={'Authorization': f"Bearer {token}"})

    assert response.status_code == 200
    assert response.get_json()['id'] == 'provider-123'
    assert response.get_json()['skillsOffered'] == []


def test_protected_route_without_token(client):
    response = client.get('/api/auth/user')

    assert response.status_code == 401
    assert response.get_json() == {'message': 'Token is missing!'}


def test_protected_route_with_garbage_token(client):
    response = client.get('/api/swap-requests', headers={'Authorization': 'Bearer garbage'})

    assert response.status_code == 401
    assert response.get_json() == {'message': 'Invalid or expired token!'}


def test_token_for_deleted_user(client, auth_headers):
    response = client.get('/api/auth/user', headers=auth_headers('ghost'))

    assert response.status_code == 404


def test_login_with_email_of_another_account(client):
    client.post('/api/auth/login', json={'idToken': id_token()})

    response = client.post('/api/auth/login', json={'idToken': id_token(sub='provider-456')})

    assert response.status_code == 409
    assert response.get_json() == {'message': 'This email is already linked to another account'}
    assert storage.get_user('provider-456') is None
