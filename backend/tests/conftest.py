import os
import sys
import pytest

# Ensure the backend root (containing the `pong_server` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from pong_server import create_app, socketio
from pong_server.services.game.state import GameSettings, GameState
from pong_server.services.game.physics import PhysicsEngine

NAMESPACE = '/pong'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = NAMESPACE
    SOCKETIO_ASYNC_MODE = 'threading'
    RANDOM_SEED = 1234
    GAME_WIDTH = 800.0
    GAME_HEIGHT = 600.0
    PADDLE_WIDTH = 15.0
    PADDLE_HEIGHT = 100.0
    PADDLE_MARGIN = 30.0
    BALL_SIZE = 10.0
    BALL_INITIAL_SPEED = 5.0
    BALL_SPEED_INCREASE_FACTOR = 1.15


class FixedRandom:
    """Stands in for random.Random with a pinned launch angle and side."""

    def __init__(self, angle=0.0, flip=False):
        self.angle = angle
        self.flip = flip
        self.calls = 0

    def uniform(self, a, b):
        self.calls += 1
        return self.angle

    def random(self):
        return 0.0 if self.flip else 0.99


class FakeTransport:
    def __init__(self):
        self.sent = []
        self.closed = []
        self.failing = set()

    def send(self, connection, text):
        if connection in self.failing:
            return False
        self.sent.append((connection, text))
        return True

    def close(self, connection):
        self.closed.append(connection)

    def frames_for(self, connection):
        return [text for conn, text in self.sent if conn == connection]


@pytest.fixture()
def settings():
    return GameSettings.from_config(
        {key: getattr(TestConfig, key) for key in dir(TestConfig) if key.isupper()}
    )


@pytest.fixture()
def state(settings):
    return GameState(settings)


@pytest.fixture()
def engine(state):
    return PhysicsEngine(state, FixedRandom())


@pytest.fixture()
def transport():
    return FakeTransport()


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
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected(NAMESPACE):
            test_client.disconnect(namespace=NAMESPACE)
