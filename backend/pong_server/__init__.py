import json
import random

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio_options = {'cors_allowed_origins': allowed_origins}
    if flask_app.config.get('SOCKETIO_ASYNC_MODE'):
        socketio_options['async_mode'] = flask_app.config['SOCKETIO_ASYNC_MODE']
    socketio.init_app(flask_app, **socketio_options)

    # Game services import the socketio extension, so load them after it exists
    from pong_server.services.game.session import PongGame
    from pong_server.services.game.state import GameSettings
    from pong_server.transport import SocketIOTransport

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/pong')
    settings = GameSettings.from_config(flask_app.config)
    game = PongGame(
        settings,
        SocketIOTransport(socketio, namespace),
        rng=random.Random(flask_app.config.get('RANDOM_SEED')),
    )
    flask_app.extensions['pong'] = game

    from pong_server.main import main
    flask_app.register_blueprint(main)

    from pong_server.api.game import game as game_blueprint
    flask_app.register_blueprint(game_blueprint, url_prefix='/api/game')

    from pong_server.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('game-settings')
    def game_settings_command():
        """Prints the settings sent to each assigned player."""
        click.echo(json.dumps(settings.to_dict(), indent=2))

    flask_app.cli.add_command(game_settings_command)

    flask_app.logger.info(
        f"[app] namespace={namespace} field={settings.game_width:.0f}x{settings.game_height:.0f} "
        f"tick={flask_app.config.get('TICK_INTERVAL_MS')}ms"
    )
    return flask_app
