import jwt
from flask import current_app, jsonify
from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from skillswap import storage
from skillswap.errors import Unauthorized

# Identity-provider claim -> users column
CLAIM_FIELDS = {
    'email': 'email',
    'first_name': 'first_name',
    'last_name': 'last_name',
    'profile_image_url': 'profile_image_url',
}


def verify_identity_token(token):
    """
    Decode and verify an ID token issued by the external identity provider.

    Returns the claims dict; raises Unauthorized when the token is missing,
    expired, badly signed or has no subject.
    """
    if not token:
        raise Unauthorized('Identity token is missing')

    audience = current_app.config.get('IDENTITY_TOKEN_AUDIENCE')
    try:
        claims = jwt.decode(
            token,
            current_app.config['IDENTITY_TOKEN_SECRET'],
            algorithms=[current_app.config['IDENTITY_TOKEN_ALGORITHM']],
            audience=audience,
            options={'verify_aud': bool(audience)},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized('Identity token has expired')
    except jwt.InvalidTokenError:
        raise Unauthorized('Invalid identity token')

    if not claims.get('sub'):
        raise Unauthorized('Identity token has no subject')
    return claims


def user_data_from_claims(claims):
    user_data = {'id': str(claims['sub'])}
    for claim, column in CLAIM_FIELDS.items():
        if claim in claims:
            user_data[column] = claims[claim]
    return user_data


def current_user_id():
    """The authenticated caller's user id (the API token's identity)."""
    return get_jwt_identity()


def admin_required(f):
    """
    Decorator for admin-only endpoints.

    Requires a valid API token, then re-reads the caller's row so a revoked
    admin flag takes effect immediately.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        user = storage.get_user(current_user_id())
        if user is None or not user.is_admin:
            return jsonify({'message': 'Access denied'}), 403
        return f(*args, **kwargs)
    return decorated_function
