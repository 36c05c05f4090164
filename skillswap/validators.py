"""Request body parsing. Each parser returns storage-ready snake_case fields."""
from flask import request

from skillswap.errors import ValidationError
from skillswap.models import AVAILABILITY_OPTIONS, SWAP_STATUSES

PROFILE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'location': 'location',
    'availability': 'availability',
    'isPublic': 'is_public',
}

MAX_TEXT_LENGTH = 255


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _optional_text(data, key, max_length=MAX_TEXT_LENGTH):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string")
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValidationError(f"'{key}' must be at most {max_length} characters")
    return value


def _required_text(data, key, max_length=MAX_TEXT_LENGTH):
    value = _optional_text(data, key, max_length)
    if not value:
        raise ValidationError(f"'{key}' is required")
    return value


def _required_int(data, key):
    value = data.get(key)
    if isinstance(value, bool):
        raise ValidationError(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be an integer")


def _required_id(data, key):
    value = data.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{key}' is required")
    return value.strip()


def validate_availability(value):
    if value not in AVAILABILITY_OPTIONS:
        raise ValidationError(f"'availability' must be one of: {', '.join(AVAILABILITY_OPTIONS)}")
    return value


def parse_profile_update(data):
    fields = {}
    for key, column in PROFILE_FIELDS.items():
        if key not in data:
            continue
        if key == 'isPublic':
            if not isinstance(data[key], bool):
                raise ValidationError("'isPublic' must be a boolean")
            fields[column] = data[key]
        elif key == 'availability':
            fields[column] = validate_availability(data[key])
        else:
            fields[column] = _optional_text(data, key)
    return fields


def parse_skill(data):
    return {
        'name': _required_text(data, 'name', max_length=100),
        'category': _optional_text(data, 'category', max_length=100),
    }


def parse_swap_request(data, requester_id):
    return {
        'requester_id': requester_id,
        'recipient_id': _required_id(data, 'recipientId'),
        'offered_skill_id': _required_int(data, 'offeredSkillId'),
        'wanted_skill_id': _required_int(data, 'wantedSkillId'),
        'message': _optional_text(data, 'message', max_length=2000),
    }


def parse_status(data):
    status = data.get('status')
    if status not in SWAP_STATUSES:
        raise ValidationError(f"'status' must be one of: {', '.join(SWAP_STATUSES)}")
    return status


def parse_rating(data, rater_id):
    rating = data.get('rating')
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("'rating' must be an integer between 1 and 5")

    rated_id = data.get('ratedId')
    return {
        'swap_request_id': _required_int(data, 'swapRequestId'),
        'rater_id': rater_id,
        'rated_id': _required_id(data, 'ratedId') if rated_id is not None else None,
        'rating': rating,
        'feedback': _optional_text(data, 'feedback', max_length=2000),
    }


def parse_platform_message(data, admin_id):
    is_active = data.get('isActive', True)
    if not isinstance(is_active, bool):
        raise ValidationError("'isActive' must be a boolean")
    return {
        'title': _required_text(data, 'title'),
        'content': _required_text(data, 'content', max_length=5000),
        'is_active': is_active,
        'created_by': admin_id,
    }


def parse_moderation_target(data):
    return {
        'user_id': _required_id(data, 'userId'),
        'reason': _optional_text(data, 'reason', max_length=2000),
    }


def parse_pagination(args, default_limit, max_limit):
    page = args.get('page', 1, type=int) or 1
    limit = args.get('limit', default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)
