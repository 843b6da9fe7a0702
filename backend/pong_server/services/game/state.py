import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

PLAYER1 = 'player1'
PLAYER2 = 'player2'
PLAYER_SLOTS = (PLAYER1, PLAYER2)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}


@dataclass
class Ball:
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        # Velocity stays server-side
        return {'x': self.x, 'y': self.y}


@dataclass
class Paddle:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}


@dataclass
class Score:
    player1: int = 0
    player2: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {'player1': self.player1, 'player2': self.player2}


@dataclass(frozen=True)
class GameSettings:
    """Immutable engine configuration, sent verbatim to each assigned player."""

    paddle_speed: float
    game_width: float
    game_height: float
    paddle_width: float
    paddle_height: float
    ball_size: float
    ball_initial_speed: float
    ball_speed_increase_factor: float
    initial_player1: Point
    initial_player2: Point
    initial_ball: Point

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'GameSettings':
        width = float(config['GAME_WIDTH'])
        height = float(config['GAME_HEIGHT'])
        paddle_width = float(config['PADDLE_WIDTH'])
        paddle_height = float(config['PADDLE_HEIGHT'])
        margin = float(config['PADDLE_MARGIN'])
        ball_size = float(config['BALL_SIZE'])
        factor = float(config['BALL_SPEED_INCREASE_FACTOR'])

        if min(width, height, paddle_width, paddle_height, ball_size) <= 0:
            raise ValueError('Field, paddle and ball sizes must be positive')
        if paddle_height > height:
            raise ValueError('PADDLE_HEIGHT must not exceed GAME_HEIGHT')
        if margin < 0 or 2 * (margin + paddle_width) >= width:
            raise ValueError('Paddles do not fit inside GAME_WIDTH')
        if factor <= 1:
            raise ValueError('BALL_SPEED_INCREASE_FACTOR must be greater than 1')

        paddle_y = (height - paddle_height) / 2
        return cls(
            paddle_speed=float(config['PADDLE_SPEED']),
            game_width=width,
            game_height=height,
            paddle_width=paddle_width,
            paddle_height=paddle_height,
            ball_size=ball_size,
            ball_initial_speed=float(config['BALL_INITIAL_SPEED']),
            ball_speed_increase_factor=factor,
            initial_player1=Point(margin, paddle_y),
            initial_player2=Point(width - margin - paddle_width, paddle_y),
            initial_ball=Point((width - ball_size) / 2, (height - ball_size) / 2),
        )

    @property
    def max_paddle_y(self) -> float:
        return self.game_height - self.paddle_height

    def to_dict(self) -> Dict[str, Any]:
        return {
            'paddleSpeed': self.paddle_speed,
            'gameWidth': self.game_width,
            'gameHeight': self.game_height,
            'paddleHeight': self.paddle_height,
            'paddleWidth': self.paddle_width,
            'ballSize': self.ball_size,
            'ballInitialSpeed': self.ball_initial_speed,
            'ballSpeedIncreaseFactor': self.ball_speed_increase_factor,
            'initialPlayer1': self.initial_player1.to_dict(),
            'initialPlayer2': self.initial_player2.to_dict(),
            'initialBall': self.initial_ball.to_dict(),
        }


@dataclass
class GameState:
    """Authoritative match snapshot.

    Every mutator (tick, paddle input, slot changes, resets) must hold
    ``lock`` while touching the fields below. The lock is re-entrant so a
    mutator may call another one, e.g. a failed broadcast releasing a slot.
    """

    settings: GameSettings
    ball: Ball = field(init=False)
    player1: Paddle = field(init=False)
    player2: Paddle = field(init=False)
    score: Score = field(default_factory=Score)
    running: bool = False
    lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    def __post_init__(self):
        s = self.settings
        self.ball = Ball(s.initial_ball.x, s.initial_ball.y)
        self.player1 = Paddle(s.initial_player1.x, s.initial_player1.y)
        self.player2 = Paddle(s.initial_player2.x, s.initial_player2.y)

    def paddle(self, slot: str) -> Paddle:
        if slot == PLAYER1:
            return self.player1
        if slot == PLAYER2:
            return self.player2
        raise KeyError(slot)

    def set_paddle_y(self, slot: str, y: float) -> float:
        """Clamp ``y`` into the field and store it on the slot's paddle."""
        clamped = min(max(float(y), 0.0), self.settings.max_paddle_y)
        with self.lock:
            self.paddle(slot).y = clamped
        return clamped

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            return {
                'ball': self.ball.to_dict(),
                'player1': self.player1.to_dict(),
                'player2': self.player2.to_dict(),
                'score': self.score.to_dict(),
            }
