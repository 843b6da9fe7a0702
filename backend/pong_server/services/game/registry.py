import logging
from typing import Dict, Hashable, List, Optional, Tuple

from .physics import PhysicsEngine
from .state import PLAYER_SLOTS, GameState

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Binds connection handles to the two player slots.

    All operations run under the game state lock, so slot changes are
    serialized with ticks, paddle input and broadcasts.
    """

    def __init__(self, state: GameState, engine: PhysicsEngine):
        self._state = state
        self._engine = engine
        self._slots: Dict[str, Hashable] = {}

    def assign(self, connection: Hashable) -> Optional[str]:
        """Bind ``connection`` to the first free slot.

        Returns the slot id, or None when both slots are taken (the caller
        closes the connection). Filling the last slot resets the match and
        starts it.
        """
        with self._state.lock:
            existing = self._find(connection)
            if existing is not None:
                return existing
            free = next((slot for slot in PLAYER_SLOTS if slot not in self._slots), None)
            if free is None:
                return None
            self._slots[free] = connection
            logger.info(f'[assign] slot={free} connection={connection}')
            if len(self._slots) == len(PLAYER_SLOTS):
                self._engine.reset_game()
                self._state.running = True
                logger.info('[match-start] both players connected')
            return free

    def release(self, connection: Hashable) -> Optional[str]:
        """Free the slot held by ``connection``; pauses and resets the match."""
        with self._state.lock:
            slot = self._find(connection)
            if slot is None:
                return None
            del self._slots[slot]
            self._state.running = False
            self._engine.reset_game()
            logger.info(f'[release] slot={slot} connection={connection} match paused')
            return slot

    def slot_of(self, connection: Hashable) -> Optional[str]:
        with self._state.lock:
            return self._find(connection)

    def sessions(self) -> List[Tuple[str, Hashable]]:
        with self._state.lock:
            return [(slot, self._slots[slot]) for slot in PLAYER_SLOTS if slot in self._slots]

    def occupied(self) -> List[str]:
        return [slot for slot, _ in self.sessions()]

    def __len__(self) -> int:
        with self._state.lock:
            return len(self._slots)

    def _find(self, connection: Hashable) -> Optional[str]:
        for slot, bound in self._slots.items():
            if bound == connection:
                return slot
        return None
