from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required

from skillswap import storage
from skillswap.auth import current_user_id, user_data_from_claims, verify_identity_token
from skillswap.errors import ApiError, internal_error

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Exchange an identity-provider ID token for an API access token.

    The user row is provisioned (or refreshed) from the token claims.
    """
    data = request.get_json(silent=True) or {}
    token = data.get('idToken')
    if not token:
        header = request.headers.get('Authorization', '')
        token = header.split("Bearer ")[-1] if header.startswith("Bearer ") else None

    try:
        claims = verify_identity_token(token)
        user = storage.upsert_user(user_data_from_claims(claims))
        access_token = create_access_token(identity=user.id)
        return jsonify({'access_token': access_token, 'user': user.to_dict()}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to log in', e)


@auth_bp.route('/user', methods=['GET'])
@jwt_required()
def get_authenticated_user():
    try:
        user = storage.get_user_with_skills(current_user_id())
        if user is None:
            return jsonify({'message': 'User not found!'}), 404
        return jsonify(user), 200
    except Exception as e:
        return internal_error('Failed to fetch user', e)
