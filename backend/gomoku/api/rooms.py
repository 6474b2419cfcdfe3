from flask import Blueprint, current_app, jsonify
from gomoku.errors import UnknownRoom


rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['room_registry']


@rooms.route('', methods=['GET'])
def list_rooms():
    """Same projection that is pushed to clients as ``updateRooms``."""
    return jsonify(_registry().snapshot())


@rooms.route('/<int:room_id>', methods=['GET'])
def get_room(room_id):
    try:
        room = _registry().find_by_id(room_id)
    except UnknownRoom as exc:
        return jsonify({'error': exc.message}), 404
    return jsonify(room.to_dict())
