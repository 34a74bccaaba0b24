from flask import Blueprint, jsonify

from arena import get_gateway

rooms = Blueprint('rooms', __name__)


@rooms.route('/stats', methods=['GET'])
def room_stats():
    """
    Returns the number of live rooms and queue sizes per game type.
    """
    return jsonify(get_gateway().service.stats()), 200


@rooms.route('/invite/<string:code>', methods=['GET'])
def get_room_by_invite(code):
    """
    Resolves an invite code (any letter case) to its waiting room.
    """
    service = get_gateway().service
    with service.lock:
        room = service.rooms.find_by_invite_code(code)
        if not room:
            return jsonify({'error': 'Invalid invite code'}), 404
        return jsonify(room.to_dict()), 200


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    service = get_gateway().service
    with service.lock:
        room = service.rooms.get(room_id)
        if not room:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(room.to_dict()), 200
