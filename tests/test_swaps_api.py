# tests/test_swaps_api.py
import pytest

from skillswap import db, storage
from skillswap.models import SwapRequest


@pytest.fixture
def alice_and_bob(make_user, skills):
    guitar, piano = skills
    make_user('alice', first_name='Alice')
    make_user('bob', first_name='Bob')
    storage.add_user_skill_offered('alice', guitar.id)
    storage.add_user_skill_wanted('bob', guitar.id)
    return guitar, piano


def _send_request(client, headers, guitar, piano, recipient='bob'):
    return client.post('/api/swap-requests', headers=headers, json={
        'recipientId': recipient,
        'offeredSkillId': guitar.id,
        'wantedSkillId': piano.id,
        'message': 'Guitar for piano?',
    })


def test_swap_request_lifecycle(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob
    alice, bob = auth_headers('alice'), auth_headers('bob')

    response = _send_request(client, alice, guitar, piano)
    assert response.status_code == 200
    created = response.get_json()
    assert created['status'] == 'pending'
    assert created['requesterId'] == 'alice'

    listed = client.get('/api/swap-requests', headers=bob).get_json()
    assert len(listed) == 1
    assert listed[0]['requester']['firstName'] == 'Alice'
    assert listed[0]['recipient']['firstName'] == 'Bob'

    response = client.put(f"/api/swap-requests/{created['id']}/status", headers=bob, json={'status': 'accepted'})
    assert response.status_code == 200
    assert response.get_json()['status'] == 'accepted'

    # Accepted requests can no longer be withdrawn
    response = client.delete(f"/api/swap-requests/{created['id']}", headers=alice)
    assert response.status_code == 404

    db.session.expire_all()
    assert db.session.get(SwapRequest, created['id']).status == 'accepted'


def test_cannot_request_swap_with_yourself(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob

    response = _send_request(client, auth_headers('alice'), guitar, piano, recipient='alice')

    assert response.status_code == 400


def test_swap_request_validation(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob
    alice = auth_headers('alice')

    assert _send_request(client, alice, guitar, piano, recipient='ghost').status_code == 404
    response = client.post('/api/swap-requests', headers=alice, json={'recipientId': 'bob'})
    assert response.status_code == 400


def test_only_recipient_answers_request(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob
    request_id = _send_request(client, auth_headers('alice'), guitar, piano).get_json()['id']

    response = client.put(
        f"/api/swap-requests/{request_id}/status",
        headers=auth_headers('alice'),
        json={'status': 'accepted'},
    )

    assert response.status_code == 403
    db.session.expire_all()
    assert db.session.get(SwapRequest, request_id).status == 'pending'


def test_illegal_status_transitions(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob
    bob = auth_headers('bob')
    request_id = _send_request(client, auth_headers('alice'), guitar, piano).get_json()['id']
    url = f"/api/swap-requests/{request_id}/status"

    assert client.put(url, headers=bob, json={'status': 'completed'}).status_code == 409
    assert client.put(url, headers=bob, json={'status': 'rejected'}).status_code == 200
    assert client.put(url, headers=bob, json={'status': 'accepted'}).status_code == 409
    assert client.put(url, headers=bob, json={'status': 'maybe'}).status_code == 400


def test_status_update_for_missing_request(client, auth_headers, alice_and_bob):
    response = client.put('/api/swap-requests/999/status', headers=auth_headers('bob'), json={'status': 'accepted'})

    assert response.status_code == 404


def test_requester_withdraws_pending_request(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob
    alice, bob = auth_headers('alice'), auth_headers('bob')
    request_id = _send_request(client, alice, guitar, piano).get_json()['id']

    assert client.delete(f"/api/swap-requests/{request_id}", headers=bob).status_code == 404
    assert client.delete(f"/api/swap-requests/{request_id}", headers=alice).status_code == 200
    assert client.get('/api/swap-requests', headers=alice).get_json() == []


def test_rating_after_completed_swap(client, auth_headers, alice_and_bob):
    guitar, piano = alice_and_bob
    alice, bob = auth_headers('alice'), auth_headers('bob')
    request_id = _send_request(client, alice, guitar, piano).get_json()['id']

    # Not completed yet
    response = client.post('/api/ratings', headers=alice, json={'swapRequestId': request_id, 'rating': 5})
    assert response.status_code == 409

    client.put(f"/api/swap-requests/{request_id}/status", headers=bob, json={'status': 'accepted'})
    client.put(f"/api/swap-requests/{request_id}/status", headers=alice, json={'status': 'completed'})

    response = client.post('/api/ratings', headers=alice, json={
        'swapRequestId': request_id,
        'ratedId': 'bob',
        'rating': 5,
        'feedback': 'Great lesson',
    })
    assert response.status_code == 200
    assert response.get_json()['ratedId'] == 'bob'

    response = client.post('/api/ratings', headers=bob, json={'swapRequestId': request_id, 'rating': 4})
    assert response.status_code == 200
    assert response.get_json()['ratedId'] == 'alice'

    assert client.get('/api/users/bob').get_json()['averageRating'] == 5
    assert client.get('/api/users/alice/ratings').get_json()['average'] == 4


def test_rating_validation(client, auth_headers, alice_and_bob, completed_swap):
    guitar, piano = alice_and_bob
    swap_request = completed_swap('alice', 'bob', guitar, piano)
    alice = auth_headers('alice')

    for value in (0, 6, 'five', True):
        response = client.post('/api/ratings', headers=alice, json={'swapRequestId': swap_request.id, 'rating': value})
        assert response.status_code == 400

    response = client.post('/api/ratings', headers=alice, json={'swapRequestId': swap_request.id, 'rating': 3})
    assert response.status_code == 200
    response = client.post('/api/ratings', headers=alice, json={'swapRequestId': swap_request.id, 'rating': 3})
    assert response.status_code == 409
