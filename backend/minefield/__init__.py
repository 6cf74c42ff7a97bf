from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, choose_turn=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', '*')
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One lobby per app; handlers and routes reach it through current_app
    from minefield.services.game.lobby import Lobby
    flask_app.extensions['minefield'] = Lobby(
        choose_turn=choose_turn,
        chat_history_limit=flask_app.config.get('CHAT_HISTORY_LIMIT', 100),
        chat_max_length=flask_app.config.get('CHAT_MAX_MESSAGE_LENGTH', 500),
    )

    from minefield.main import main
    flask_app.register_blueprint(main)

    from minefield.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from minefield.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
