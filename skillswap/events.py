from flask import current_app
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_socketio import emit, join_room, leave_room
from jwt.exceptions import PyJWTError

from skillswap import socketio
from skillswap.utils import get_user_id_from_token


def user_room(user_id):
    return f"user_{user_id}"


def notify_user(user_id, event, payload):
    """Push an event to every socket the user has joined with."""
    socketio.emit(event, payload, to=user_room(user_id))


def broadcast_platform_message(message):
    socketio.emit('platform_message', message.to_dict())


# WebSocket events: clients join their personal room with their API token
@socketio.on('join')
def handle_join(data):
    token = (data or {}).get('token')
    if not token:
        emit('status', {'message': 'Token is missing!'})
        return

    try:
        user_id = get_user_id_from_token(token)
    except (JWTExtendedException, PyJWTError) as e:
        current_app.logger.debug(f"[DEBUG] Rejected socket join: {e}")
        emit('status', {'message': 'Invalid or expired token!'})
        return

    room = user_room(user_id)
    join_room(room)
    current_app.logger.debug(f"[DEBUG] User {user_id} joined room: {room}")
    emit('status', {'message': f"User joined room: {room}", 'room': room})


@socketio.on('leave')
def handle_leave(data):
    room = (data or {}).get('room')
    if not room:
        return
    leave_room(room)
    current_app.logger.debug(f"[DEBUG] Socket left room: {room}")
    emit('status', {'message': f"User has left the room: {room}"})
