import os
import sys
import pytest

# Ensure the backend root (containing the `dicetable` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from dicetable import create_app, socketio


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_NAMESPACE = '/'
    MIN_PLAYERS = 2
    STARTING_SCORE = 1000
    SPAWN_X = 850
    SPAWN_Y = 850
    DIE_FACES = 6
    MAX_DICE = 0


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['rooms']


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients; each one is a separate connection."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
