from flask import Blueprint, jsonify

from skillswap import storage
from skillswap.errors import internal_error

message_bp = Blueprint('platform_messages', __name__)


@message_bp.route('', methods=['GET'])
def list_active_messages():
    try:
        return jsonify([message.to_dict() for message in storage.get_active_platform_messages()]), 200
    except Exception as e:
        return internal_error('Failed to fetch platform messages', e)
