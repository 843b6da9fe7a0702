"""JSON wire format shared with the browser clients.

Inbound messages are enveloped as ``{"type": ..., "payload": {...}}``.
Outbound messages carry their ``type`` next to the body fields.
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Union

PLAYER_MOVE = 'player-move'
PLAYER_ASSIGNMENT = 'player-assignment'
GAME_STATE = 'game-state'
GAME_FULL = 'game-full'


class MessageError(ValueError):
    """Raised when an inbound payload cannot be decoded."""


@dataclass(frozen=True)
class PlayerMove:
    y: float


@dataclass(frozen=True)
class UnknownMessage:
    type: str


ClientMessage = Union[PlayerMove, UnknownMessage]


def decode_client_message(raw: Union[str, bytes]) -> ClientMessage:
    if not isinstance(raw, (str, bytes, bytearray)):
        raise MessageError(f'expected a text frame, got {type(raw).__name__}')
    try:
        envelope = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MessageError(f'invalid JSON: {exc}') from exc
    if not isinstance(envelope, dict):
        raise MessageError('message envelope must be an object')
    msg_type = envelope.get('type')
    if not isinstance(msg_type, str):
        raise MessageError('message type is missing')

    if msg_type == PLAYER_MOVE:
        return PlayerMove(y=_decode_y(envelope.get('payload')))
    return UnknownMessage(type=msg_type)


def _decode_y(payload: Any) -> float:
    if not isinstance(payload, dict) or 'y' not in payload:
        raise MessageError('player-move payload must be an object with "y"')
    y = payload['y']
    # bool is an int subclass but never a position
    if isinstance(y, bool) or not isinstance(y, (int, float)):
        raise MessageError('player-move "y" must be a number')
    try:
        value = float(y)
    except OverflowError:
        # Integers past float range still clamp to the nearest field edge
        value = math.inf if y > 0 else -math.inf
    if math.isnan(value):
        raise MessageError('player-move "y" must not be NaN')
    return value


def _encode(message: Dict[str, Any]) -> str:
    return json.dumps(message)


def encode_player_assignment(slot: str, settings: Dict[str, Any]) -> str:
    return _encode({'type': PLAYER_ASSIGNMENT, 'player': slot, 'settings': settings})


def encode_game_state(snapshot: Dict[str, Any]) -> str:
    return _encode({'type': GAME_STATE, **snapshot})


def encode_game_full() -> str:
    return _encode({'type': GAME_FULL})
