from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from skillswap import storage
from skillswap.auth import current_user_id
from skillswap.errors import ApiError, NotFound, ValidationError, internal_error
from skillswap.uploads import delete_profile_photo, save_profile_photo
from skillswap.validators import (
    get_json_body,
    parse_pagination,
    parse_profile_update,
    parse_skill,
    validate_availability,
)

user_bp = Blueprint('users', __name__)


@user_bp.route('', methods=['GET'])
def list_users():
    """
    Browse public users.

    With ``search`` the full match list is returned and ``total`` is its size;
    otherwise the public directory is paginated with ``page``/``limit``.
    ``availability`` narrows either path.
    """
    try:
        search = request.args.get('search', '').strip()
        availability = request.args.get('availability') or None
        if availability:
            validate_availability(availability)

        if search:
            users = storage.search_users(search, {'availability': availability})
            return jsonify({'users': users, 'total': len(users)}), 200

        page, limit = parse_pagination(
            request.args,
            current_app.config['DEFAULT_PAGE_SIZE'],
            current_app.config['MAX_PAGE_SIZE'],
        )
        return jsonify(storage.get_public_users(page, limit, {'availability': availability})), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to fetch users', e)


@user_bp.route('/<user_id>', methods=['GET'])
def get_user(user_id):
    try:
        user = storage.get_user_with_skills(user_id)
        if user is None:
            return jsonify({'message': 'User not found'}), 404
        return jsonify(user), 200
    except Exception as e:
        return internal_error('Failed to fetch user', e)


@user_bp.route('/profile', methods=['PUT'])
@jwt_required()
def update_profile():
    user_id = current_user_id()
    current_app.logger.debug(f"[DEBUG] Received request to update profile for user_id: {user_id}")

    try:
        fields = parse_profile_update(get_json_body())
        user = storage.update_user_profile(user_id, fields)
        return jsonify(user.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to update profile', e)


@user_bp.route('/profile-photo', methods=['POST'])
@jwt_required()
def upload_profile_photo():
    user_id = current_user_id()
    # Touching request.files enforces MAX_CONTENT_LENGTH (413)
    file = request.files.get('profilePhoto')
    if file is None or not file.filename:
        return jsonify({'message': 'No file uploaded'}), 400

    try:
        user = storage.get_user(user_id)
        if user is None:
            raise NotFound('User not found')

        profile_image_url = save_profile_photo(file, user_id)
        previous = user.custom_profile_image
        user = storage.update_user_profile(user_id, {'custom_profile_image': profile_image_url})
        delete_profile_photo(previous)

        return jsonify({
            'message': 'Profile photo updated successfully',
            'profileImageUrl': profile_image_url,
            'user': user.to_dict(),
        }), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to upload profile photo', e)


@user_bp.route('/profile-photo', methods=['DELETE'])
@jwt_required()
def remove_profile_photo():
    user_id = current_user_id()

    try:
        user = storage.get_user(user_id)
        if user is None or not user.custom_profile_image:
            return jsonify({'message': 'No custom profile photo found'}), 404

        delete_profile_photo(user.custom_profile_image)
        user = storage.update_user_profile(user_id, {'custom_profile_image': None})
        return jsonify({'message': 'Profile photo deleted successfully', 'user': user.to_dict()}), 200
    except Exception as e:
        return internal_error('Failed to delete profile photo', e)


def _resolve_skill_id(data):
    """Accept either an existing ``skillId`` or a ``name`` to find-or-create."""
    if data.get('skillId') is not None:
        try:
            return int(data['skillId'])
        except (TypeError, ValueError):
            raise ValidationError("'skillId' must be an integer")
    skill_data = parse_skill(data)
    return storage.find_or_create_skill(skill_data['name'], skill_data['category']).id


@user_bp.route('/skills-offered', methods=['POST'])
@jwt_required()
def add_skill_offered():
    try:
        skill_id = _resolve_skill_id(get_json_body())
        storage.add_user_skill_offered(current_user_id(), skill_id)
        return jsonify({'message': 'Skill added', 'skillId': skill_id}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to add skill', e)


@user_bp.route('/skills-wanted', methods=['POST'])
@jwt_required()
def add_skill_wanted():
    try:
        skill_id = _resolve_skill_id(get_json_body())
        storage.add_user_skill_wanted(current_user_id(), skill_id)
        return jsonify({'message': 'Skill added', 'skillId': skill_id}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to add skill', e)


@user_bp.route('/skills-offered/<int:skill_id>', methods=['DELETE'])
@jwt_required()
def remove_skill_offered(skill_id):
    try:
        storage.remove_user_skill_offered(current_user_id(), skill_id)
        return jsonify({'message': 'Skill removed'}), 200
    except Exception as e:
        return internal_error('Failed to remove skill', e)


@user_bp.route('/skills-wanted/<int:skill_id>', methods=['DELETE'])
@jwt_required()
def remove_skill_wanted(skill_id):
    try:
        storage.remove_user_skill_wanted(current_user_id(), skill_id)
        return jsonify({'message': 'Skill removed'}), 200
    except Exception as e:
        return internal_error('Failed to remove skill', e)


@user_bp.route('/<user_id>/ratings', methods=['GET'])
def get_user_ratings(user_id):
    try:
        ratings = storage.get_user_ratings(user_id)
        average = storage.get_average_rating(user_id)
        return jsonify({'ratings': ratings, 'average': average}), 200
    except Exception as e:
        return internal_error('Failed to fetch ratings', e)
