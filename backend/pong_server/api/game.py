from flask import Blueprint, current_app, jsonify

game = Blueprint('game', __name__)


@game.route('/settings', methods=['GET'])
def get_settings():
    return jsonify(current_app.extensions['pong'].settings.to_dict())


@game.route('/state', methods=['GET'])
def get_state():
    """
    Read-only view of the match: whether it is running, which slots are
    taken, and the same body the game-state frame carries.
    """
    return jsonify(current_app.extensions['pong'].describe())
