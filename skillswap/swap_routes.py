from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required

from skillswap import storage
from skillswap.auth import current_user_id
from skillswap.errors import ApiError, internal_error
from skillswap.events import notify_user
from skillswap.validators import get_json_body, parse_rating, parse_status, parse_swap_request

swap_bp = Blueprint('swaps', __name__)


@swap_bp.route('/swap-requests', methods=['POST'])
@jwt_required()
def create_swap_request():
    requester_id = current_user_id()

    try:
        request_data = parse_swap_request(get_json_body(), requester_id)
        swap_request = storage.create_swap_request(request_data)
        notify_user(swap_request.recipient_id, 'swap_request', swap_request.to_dict())
        return jsonify(swap_request.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to create swap request', e)


@swap_bp.route('/swap-requests', methods=['GET'])
@jwt_required()
def list_swap_requests():
    user_id = current_user_id()

    try:
        requests = storage.get_swap_requests_for_user(user_id)
        current_app.logger.debug(f"[DEBUG] Retrieved {len(requests)} swap requests for user ID {user_id}.")
        return jsonify(requests), 200
    except Exception as e:
        return internal_error('Failed to fetch swap requests', e)


@swap_bp.route('/swap-requests/<int:request_id>/status', methods=['PUT'])
@jwt_required()
def update_swap_request_status(request_id):
    user_id = current_user_id()

    try:
        status = parse_status(get_json_body())
        swap_request = storage.update_swap_request_status(request_id, status, acting_user_id=user_id)

        other_party = (
            swap_request.requester_id if user_id == swap_request.recipient_id else swap_request.recipient_id
        )
        notify_user(other_party, 'swap_request_status', swap_request.to_dict())
        return jsonify(swap_request.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to update swap request', e)


@swap_bp.route('/swap-requests/<int:request_id>', methods=['DELETE'])
@jwt_required()
def delete_swap_request(request_id):
    try:
        # Missing, not owned and no-longer-pending all look the same to the caller
        if not storage.delete_swap_request(request_id, current_user_id()):
            return jsonify({'message': 'Swap request not found'}), 404
        return jsonify({'message': 'Swap request deleted'}), 200
    except Exception as e:
        return internal_error('Failed to delete swap request', e)


@swap_bp.route('/ratings', methods=['POST'])
@jwt_required()
def create_rating():
    try:
        rating = storage.create_rating(parse_rating(get_json_body(), current_user_id()))
        return jsonify(rating.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to create rating', e)
