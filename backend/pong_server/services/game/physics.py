import logging
import math
import random
from typing import Optional

from .state import PLAYER1, PLAYER2, Ball, GameSettings, GameState, Paddle

logger = logging.getLogger(__name__)

# Launch angles are drawn within this many radians of the horizontal axis
LAUNCH_SPREAD = math.pi / 4


class PhysicsEngine:
    """Fixed-step ball simulation over a shared ``GameState``.

    Every public method takes the state lock itself, so callers may invoke
    them with or without already holding it.

    ``rng`` only needs ``uniform(a, b)`` and ``random()``; pass a seeded
    ``random.Random`` or a stub to pin the launch angle in tests.
    """

    def __init__(self, state: GameState, rng=None):
        self.state = state
        self.rng = rng if rng is not None else random.Random()

    @property
    def settings(self) -> GameSettings:
        return self.state.settings

    def step(self) -> Optional[str]:
        """Advance one tick. Returns the slot that scored, if any."""
        with self.state.lock:
            ball = self.state.ball
            prev_x = ball.x
            ball.x += ball.vx
            ball.y += ball.vy
            self._bounce_off_walls(ball)
            self._bounce_off_paddle(ball, prev_x)
            return self._check_goal(ball)

    def _bounce_off_walls(self, ball: Ball) -> None:
        floor = self.settings.game_height - self.settings.ball_size
        if ball.y <= 0:
            ball.y = 0.0
            ball.vy = abs(ball.vy)
            logger.debug('[wall] top')
        elif ball.y >= floor:
            ball.y = floor
            ball.vy = -abs(ball.vy)
            logger.debug('[wall] bottom')

    def _bounce_off_paddle(self, ball: Ball, prev_x: float) -> None:
        # Only the paddle the ball is heading toward can be hit
        if ball.vx < 0:
            slot, paddle = PLAYER1, self.state.player1
        elif ball.vx > 0:
            slot, paddle = PLAYER2, self.state.player2
        else:
            return
        if not (self._overlaps(ball, paddle) or self._swept_through(ball, paddle, prev_x)):
            return

        s = self.settings
        if slot == PLAYER1:
            ball.x = paddle.x + s.paddle_width
        else:
            ball.x = paddle.x - s.ball_size
        ball.vx = -ball.vx * s.ball_speed_increase_factor
        logger.debug(f'[paddle-hit] slot={slot} vx={ball.vx:.3f}')

    def _level_with(self, ball: Ball, paddle: Paddle) -> bool:
        s = self.settings
        return ball.y < paddle.y + s.paddle_height and ball.y + s.ball_size > paddle.y

    def _overlaps(self, ball: Ball, paddle: Paddle) -> bool:
        s = self.settings
        horizontal = ball.x < paddle.x + s.paddle_width and ball.x + s.ball_size > paddle.x
        return horizontal and self._level_with(ball, paddle)

    def _swept_through(self, ball: Ball, paddle: Paddle, prev_x: float) -> bool:
        """Catch a fast ball that crossed the paddle's facing edge within one tick."""
        s = self.settings
        if ball.vx < 0:
            face = paddle.x + s.paddle_width
            crossed = prev_x >= face and ball.x < face
        else:
            face = paddle.x
            crossed = prev_x + s.ball_size <= face and ball.x + s.ball_size > face
        return crossed and self._level_with(ball, paddle)

    def _check_goal(self, ball: Ball) -> Optional[str]:
        score = self.state.score
        if ball.x < 0:
            scorer = PLAYER2
            score.player2 += 1
        elif ball.x + self.settings.ball_size > self.settings.game_width:
            scorer = PLAYER1
            score.player1 += 1
        else:
            return None
        logger.info(f'[goal] scorer={scorer} score={score.player1}-{score.player2}')
        self.reset_ball()
        return scorer

    def reset_ball(self) -> None:
        """Recentre the ball and relaunch it toward a random side."""
        s = self.settings
        with self.state.lock:
            angle = self.rng.uniform(-LAUNCH_SPREAD, LAUNCH_SPREAD)
            if self.rng.random() < 0.5:
                angle += math.pi
            ball = self.state.ball
            ball.x = s.initial_ball.x
            ball.y = s.initial_ball.y
            ball.vx = s.ball_initial_speed * math.cos(angle)
            ball.vy = s.ball_initial_speed * math.sin(angle)
        logger.debug(f'[ball-reset] vx={ball.vx:.3f} vy={ball.vy:.3f}')

    def reset_game(self) -> None:
        s = self.settings
        with self.state.lock:
            self.state.score.player1 = 0
            self.state.score.player2 = 0
            self.state.player1.x, self.state.player1.y = s.initial_player1.x, s.initial_player1.y
            self.state.player2.x, self.state.player2.y = s.initial_player2.x, s.initial_player2.y
            self.reset_ball()
        logger.info('[game-reset] score=0-0')
