from flask import Blueprint, jsonify, current_app
from dicetable.models import Room

rooms = Blueprint('rooms', __name__)


def _summary(room: Room, connection_count: int):
    return {
        'roomId': room.key,
        'protected': room.protected,
        'playerCount': len(room.players),
        'connectionCount': connection_count,
        'gameStarted': room.game_started,
    }


@rooms.route('', methods=['GET'])
def list_rooms():
    """Lobby listing of every live room. Passwords are never included."""
    store = current_app.extensions['rooms']
    registry = current_app.extensions['connections']
    return jsonify([
        _summary(room, registry.count(room.key))
        for room in sorted(store.list_rooms(), key=lambda r: r.key)
    ])


@rooms.route('/<path:room_key>', methods=['GET'])
def get_room(room_key):
    store = current_app.extensions['rooms']
    room = store.get_room(room_key)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    registry = current_app.extensions['connections']
    return jsonify(_summary(room, registry.count(room.key)))
