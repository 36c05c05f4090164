from flask import current_app, jsonify

from skillswap import db


class ApiError(Exception):
    """Base class for errors that map onto a JSON ``{message}`` response."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self):
        return {'message': self.message}, self.status_code


class ValidationError(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 409


def internal_error(message, error):
    """Roll back, log the detail and answer with a generic 500."""
    db.session.rollback()
    current_app.logger.error(f"[ERROR] {message}: {error}")
    return jsonify({'message': message}), 500
