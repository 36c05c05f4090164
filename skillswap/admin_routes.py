from flask import Blueprint, jsonify, request

from skillswap import storage
from skillswap.auth import admin_required, current_user_id
from skillswap.errors import ApiError, internal_error
from skillswap.events import broadcast_platform_message
from skillswap.validators import get_json_body, parse_moderation_target, parse_platform_message

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_all_users():
    try:
        return jsonify([user.to_dict() for user in storage.get_all_users()]), 200
    except Exception as e:
        return internal_error('Failed to fetch users', e)


@admin_bp.route('/ban-user', methods=['POST'])
@admin_required
def ban_user():
    try:
        target = parse_moderation_target(get_json_body())
        storage.ban_user(target['user_id'], current_user_id(), target['reason'])
        return jsonify({'message': 'User banned'}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to ban user', e)


@admin_bp.route('/unban-user', methods=['POST'])
@admin_required
def unban_user():
    try:
        target = parse_moderation_target(get_json_body())
        storage.unban_user(target['user_id'], current_user_id())
        return jsonify({'message': 'User unbanned'}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to unban user', e)


@admin_bp.route('/skills', methods=['GET'])
@admin_required
def list_pending_skills():
    try:
        return jsonify([skill.to_dict() for skill in storage.get_pending_skills()]), 200
    except Exception as e:
        return internal_error('Failed to fetch skills', e)


@admin_bp.route('/skills/<int:skill_id>/approve', methods=['POST'])
@admin_required
def approve_skill(skill_id):
    try:
        storage.approve_skill(skill_id, current_user_id())
        return jsonify({'message': 'Skill approved'}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to approve skill', e)


@admin_bp.route('/skills/<int:skill_id>/reject', methods=['POST'])
@admin_required
def reject_skill(skill_id):
    try:
        reason = (request.get_json(silent=True) or {}).get('reason')
        storage.reject_skill(skill_id, current_user_id(), reason)
        return jsonify({'message': 'Skill rejected'}), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to reject skill', e)


@admin_bp.route('/swap-requests', methods=['GET'])
@admin_required
def list_all_swap_requests():
    try:
        return jsonify(storage.get_all_swap_requests()), 200
    except Exception as e:
        return internal_error('Failed to fetch swap requests', e)


@admin_bp.route('/platform-message', methods=['POST'])
@admin_required
def create_platform_message():
    try:
        message = storage.create_platform_message(parse_platform_message(get_json_body(), current_user_id()))
        if message.is_active:
            broadcast_platform_message(message)
        return jsonify(message.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to create message', e)


@admin_bp.route('/platform-message/<int:message_id>/deactivate', methods=['PUT'])
@admin_required
def deactivate_platform_message(message_id):
    try:
        message = storage.deactivate_platform_message(message_id, current_user_id())
        return jsonify(message.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to deactivate message', e)


@admin_bp.route('/actions', methods=['GET'])
@admin_required
def list_admin_actions():
    try:
        limit = request.args.get('limit', 100, type=int)
        return jsonify([action.to_dict() for action in storage.get_admin_actions(limit)]), 200
    except Exception as e:
        return internal_error('Failed to fetch admin actions', e)
