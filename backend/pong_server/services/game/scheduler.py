import logging
import threading
import time
from typing import Callable, Optional

from pong_server import socketio

logger = logging.getLogger(__name__)


class TickScheduler:
    """Runs ``tick`` at a fixed rate.

    - Ticks never overlap: ``fire`` skips a tick while the previous one runs
    - Periods missed because a tick overran are dropped, not replayed
    - Exceptions from ``tick`` are logged and the loop keeps going
    """

    def __init__(
        self,
        tick: Callable[[], object],
        interval_sec: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], object] = time.sleep,
    ):
        if interval_sec <= 0:
            raise ValueError('Tick interval must be positive')
        self.tick = tick
        self.interval_sec = interval_sec
        self._clock = clock
        self._sleep = sleep
        self._stop_requested = threading.Event()
        self.running = False
        self._busy = threading.Lock()
        self.ticks_run = 0
        self.ticks_dropped = 0

    def fire(self) -> bool:
        if not self._busy.acquire(blocking=False):
            self.ticks_dropped += 1
            logger.debug('[tick-skip] previous tick still running')
            return False
        try:
            self.tick()
        except Exception:
            logger.exception('[tick-error] tick raised')
        finally:
            self.ticks_run += 1
            self._busy.release()
        return True

    def run(self, max_ticks: Optional[int] = None) -> None:
        self.running = True
        logger.info(f'[tick-loop] start interval={self.interval_sec * 1000:.0f}ms')
        fired = 0
        next_due = self._clock()
        while not self._stop_requested.is_set():
            self.fire()
            fired += 1
            if max_ticks is not None and fired >= max_ticks:
                break
            next_due += self.interval_sec
            now = self._clock()
            if now - next_due >= self.interval_sec:
                missed = int((now - next_due) // self.interval_sec)
                next_due += missed * self.interval_sec
                self.ticks_dropped += missed
                logger.debug(f'[tick-late] dropped={missed}')
            self._sleep(max(0.0, next_due - now))
        self.running = False
        logger.info(f'[tick-loop] stop ticks={self.ticks_run} dropped={self.ticks_dropped}')

    def stop(self) -> None:
        self._stop_requested.set()


def start_tick_loop(app) -> Optional[TickScheduler]:
    """Start the game tick loop as a Socket.IO background task.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Sleeps through ``socketio.sleep`` so it cooperates with eventlet/gevent
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return None

    game = app.extensions['pong']
    interval = int(app.config.get('TICK_INTERVAL_MS', 16)) / 1000.0
    scheduler = TickScheduler(game.tick, interval, sleep=socketio.sleep)
    app.extensions['pong_scheduler'] = scheduler
    socketio.start_background_task(scheduler.run)
    return scheduler
