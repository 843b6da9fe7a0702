from pong_server import create_app, socketio
from pong_server.services.game.scheduler import start_tick_loop

app = create_app()

if __name__ == '__main__':
    start_tick_loop(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True, use_reloader=False)
