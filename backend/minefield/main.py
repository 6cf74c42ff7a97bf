from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the minefield game server!'})


@main.route('/health')
def health():
    return jsonify(current_app.extensions['minefield'].health())


@main.route('/stats')
def stats():
    return jsonify(current_app.extensions['minefield'].stats())
