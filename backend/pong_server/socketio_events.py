from flask import current_app, request

from pong_server import socketio


def _game():
    return current_app.extensions['pong']


def _get_sid() -> str:
    return request.sid  # type: ignore


def handle_connect(auth=None):
    sid = _get_sid()
    current_app.logger.info(f'[connect] sid={sid}')
    if _game().on_connect(sid) is None:
        # Refuse the handshake as well; the transport close may land after it
        return False


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f'[disconnect] sid={sid} reason={reason}')
    _game().on_disconnect(sid)


def handle_message(data):
    _game().on_message(_get_sid(), data)


def register_socketio_handlers(namespace: str) -> None:
    """Register the Pong channel handlers on ``namespace``.

    Clients exchange JSON text frames as plain Socket.IO ``message`` events.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
