# tests/conftest.py
import pytest
from flask_jwt_extended import create_access_token

from skillswap import create_app, db, storage


@pytest.fixture(scope="function")
def app(tmp_path):
    """A fresh app on an in-memory SQLite database, with an app context pushed."""
    app = create_app(
        'skillswap.config.TestingConfig',
        {'UPLOAD_FOLDER': str(tmp_path / 'uploads')},
    )
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def make_user(app):
    """Factory provisioning users the way a login would."""
    def _make_user(user_id, **fields):
        user_data = {
            'id': user_id,
            'email': f"{user_id}@example.com",
            'first_name': user_id.capitalize(),
            'last_name': 'Tester',
        }
        user_data.update(fields)
        return storage.upsert_user(user_data)
    return _make_user


@pytest.fixture(scope="function")
def auth_headers(app):
    def _auth_headers(user_id):
        return {'Authorization': f"Bearer {create_access_token(identity=user_id)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def skills(app):
    guitar = storage.find_or_create_skill('Guitar', 'Music')
    piano = storage.find_or_create_skill('Piano', 'Music')
    return guitar, piano


@pytest.fixture(scope="function")
def completed_swap(app):
    """Create a swap between two users and drive it to ``completed``."""
    def _completed_swap(requester_id, recipient_id, offered_skill, wanted_skill):
        swap_request = storage.create_swap_request({
            'requester_id': requester_id,
            'recipient_id': recipient_id,
            'offered_skill_id': offered_skill.id,
            'wanted_skill_id': wanted_skill.id,
        })
        storage.update_swap_request_status(swap_request.id, 'accepted', acting_user_id=recipient_id)
        storage.update_swap_request_status(swap_request.id, 'completed', acting_user_id=requester_id)
        return swap_request
    return _completed_swap
