import logging
from typing import Hashable, Protocol

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def send(self, connection: Hashable, text: str) -> bool:
        ...

    def close(self, connection: Hashable) -> None:
        ...


class SocketIOTransport:
    """Delivers text frames to Socket.IO sids as ``message`` events."""

    def __init__(self, socketio, namespace: str):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, sid: str, text: str) -> bool:
        if not self.socketio.server.manager.is_connected(sid, self.namespace):
            logger.warning(f'[send-skip] sid={sid} is no longer connected')
            return False
        try:
            self.socketio.send(text, to=sid, namespace=self.namespace)
        except Exception:
            logger.exception(f'[send-error] sid={sid}')
            return False
        return True

    def close(self, sid: str) -> None:
        # Deferred so it is safe to call from inside the connect handler
        self.socketio.start_background_task(self._disconnect, sid)

    def _disconnect(self, sid: str) -> None:
        logger.info(f'[close] sid={sid}')
        self.socketio.server.disconnect(sid, namespace=self.namespace)
