import os


def _optional_int(name):
    value = os.environ.get(name)
    return int(value) if value not in (None, '') else None


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Playfield geometry (pixels)
    GAME_WIDTH = float(os.environ.get('GAME_WIDTH', '800'))
    GAME_HEIGHT = float(os.environ.get('GAME_HEIGHT', '600'))
    PADDLE_WIDTH = float(os.environ.get('PADDLE_WIDTH', '15'))
    PADDLE_HEIGHT = float(os.environ.get('PADDLE_HEIGHT', '100'))
    # Distance between a paddle and its side wall
    PADDLE_MARGIN = float(os.environ.get('PADDLE_MARGIN', '30'))
    # Sent to clients only; the server never moves paddles on its own
    PADDLE_SPEED = float(os.environ.get('PADDLE_SPEED', '15'))
    BALL_SIZE = float(os.environ.get('BALL_SIZE', '10'))
    BALL_INITIAL_SPEED = float(os.environ.get('BALL_INITIAL_SPEED', '5'))
    BALL_SPEED_INCREASE_FACTOR = float(os.environ.get('BALL_SPEED_INCREASE_FACTOR', '1.15'))
    # Simulation tick period (ms), ~60 ticks per second
    TICK_INTERVAL_MS = int(os.environ.get('TICK_INTERVAL_MS', '16'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/pong')
    # None lets Flask-SocketIO pick eventlet/gevent/threading
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE') or None
    # Optional: pin the ball launch angles. Unset uses OS entropy.
    RANDOM_SEED = _optional_int('RANDOM_SEED')
    ENABLE_SCHEDULER_IN_TESTS = False
