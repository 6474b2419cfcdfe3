import os
import sys
import random
import pytest

# Ensure the backend root (containing the `gomoku` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gomoku import create_app, socketio
from gomoku.services.games import RoomRegistry, SessionManager


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROOM_COUNT = 3
    BOARD_SIZE = 15
    # Deterministic colors: first to join plays black
    RANDOMIZE_COLORS = False
    SOCKETIO_NAMESPACE = '/ws'
    SWITCH_NAMESPACE = '/switch'
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients on the game namespace; all are disconnected at teardown."""
    created = []

    def _make(namespace='/ws'):
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=namespace,
        )
        created.append((test_client, namespace))
        return test_client

    yield _make
    for test_client, namespace in created:
        try:
            if test_client.is_connected(namespace):
                test_client.disconnect(namespace=namespace)
        except Exception:
            pass


@pytest.fixture()
def registry():
    return RoomRegistry(room_count=3)


@pytest.fixture()
def manager(registry):
    return SessionManager(registry, randomize=False)


@pytest.fixture()
def seeded_manager(registry):
    return SessionManager(registry, randomize=True, rng=random.Random(7))
