from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
def list_rooms():
    return jsonify(current_app.extensions['minefield'].stats()['rooms'])


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    """
    Read-only summary of one room. Unknown ids are a 404, never a new room.
    """
    summary = current_app.extensions['minefield'].room_summary(room_id)
    if summary is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(summary)
