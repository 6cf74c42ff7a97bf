import os
import sys
import pytest

# Ensure the backend root (containing the `minefield` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from minefield import create_app, socketio
from minefield.services.game.lobby import Lobby


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    CHAT_HISTORY_LIMIT = 100
    CHAT_MAX_MESSAGE_LENGTH = 500


def first_option(options):
    return options[0]


@pytest.fixture()
def lobby():
    # First turn always goes to player 0 unless a test swaps the chooser
    return Lobby(choose_turn=first_option)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig, choose_turn=first_option)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; all are disconnected on teardown."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
