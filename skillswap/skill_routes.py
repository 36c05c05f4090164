from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from skillswap import storage
from skillswap.errors import ApiError, internal_error
from skillswap.validators import get_json_body, parse_skill

skill_bp = Blueprint('skills', __name__)


@skill_bp.route('', methods=['GET'])
def list_skills():
    try:
        return jsonify([skill.to_dict() for skill in storage.get_skills()]), 200
    except Exception as e:
        return internal_error('Failed to fetch skills', e)


@skill_bp.route('', methods=['POST'])
@jwt_required()
def create_skill():
    # "Python" and "python" resolve to the same catalog row
    try:
        skill_data = parse_skill(get_json_body())
        skill = storage.find_or_create_skill(skill_data['name'], skill_data['category'])
        return jsonify(skill.to_dict()), 200
    except ApiError as e:
        return e.to_response()
    except Exception as e:
        return internal_error('Failed to create skill', e)
