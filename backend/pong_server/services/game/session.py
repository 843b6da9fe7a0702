import logging
from typing import Any, Dict, Hashable, Optional

from pong_server.messages import (
    MessageError,
    PlayerMove,
    decode_client_message,
    encode_game_full,
    encode_game_state,
    encode_player_assignment,
)
from pong_server.transport import Transport

from .physics import PhysicsEngine
from .registry import SessionRegistry
from .state import GameSettings, GameState

logger = logging.getLogger(__name__)


class PongGame:
    """Ties connection events and inbound frames to the shared match state."""

    def __init__(self, settings: GameSettings, transport: Transport, rng=None):
        self.settings = settings
        self.transport = transport
        self.state = GameState(settings)
        self.engine = PhysicsEngine(self.state, rng)
        self.registry = SessionRegistry(self.state, self.engine)
        self.engine.reset_game()

    @property
    def lock(self):
        return self.state.lock

    # ---- Connection lifecycle ----

    def on_connect(self, connection: Hashable) -> Optional[str]:
        with self.lock:
            slot = self.registry.assign(connection)
            if slot is not None:
                # Sent before releasing the lock so no game-state frame can precede it
                message = encode_player_assignment(slot, self.settings.to_dict())
                if not self.transport.send(connection, message):
                    logger.warning(f'[assign-failed] slot={slot} connection={connection}')
                    self.on_disconnect(connection)
                    return None
                return slot

        logger.warning(f'[reject] connection={connection} game is full')
        self.transport.send(connection, encode_game_full())
        self.transport.close(connection)
        return None

    def on_disconnect(self, connection: Hashable) -> Optional[str]:
        return self.registry.release(connection)

    def on_message(self, connection: Hashable, raw: Any) -> None:
        try:
            message = decode_client_message(raw)
        except MessageError as exc:
            logger.warning(f'[drop] connection={connection} malformed message: {exc}')
            return

        if not isinstance(message, PlayerMove):
            logger.warning(f'[drop] connection={connection} unknown message type={message.type!r}')
            return

        slot = self.registry.slot_of(connection)
        if slot is None:
            logger.warning(f'[drop] connection={connection} player-move from unassigned connection')
            return
        self.update_player_position(slot, message.y)

    def update_player_position(self, slot: str, y: float) -> float:
        with self.lock:
            clamped = self.state.set_paddle_y(slot, y)
        logger.debug(f'[move] slot={slot} y={clamped}')
        return clamped

    # ---- Tick and fan-out ----

    def tick(self) -> bool:
        """One simulation step plus broadcast; idle while a player is missing."""
        with self.lock:
            if not self.state.running:
                return False
            self.engine.step()
            self.broadcast()
        return True

    def broadcast(self) -> int:
        """Send the current snapshot to every assigned connection.

        Sending happens under the state lock, so a connection released before
        this call never receives the frame. Connections whose send fails are
        released afterwards. Returns the number of successful deliveries.
        """
        with self.lock:
            message = encode_game_state(self.state.snapshot())
            failed = []
            delivered = 0
            for slot, connection in self.registry.sessions():
                if self.transport.send(connection, message):
                    delivered += 1
                else:
                    failed.append((slot, connection))
            for slot, connection in failed:
                logger.warning(f'[send-failed] slot={slot} connection={connection} treating as disconnect')
                self.on_disconnect(connection)
        return delivered

    def describe(self) -> Dict[str, Any]:
        with self.lock:
            return {
                'running': self.state.running,
                'players': self.registry.occupied(),
                'state': self.state.snapshot(),
            }
