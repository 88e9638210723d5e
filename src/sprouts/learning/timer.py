from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional

from sprouts.utils.logging import get_logger

logger = get_logger(__name__)

TICK_SECONDS = 1.0


class SessionTimer:
    """
    Count foreground play time and announce when the parent's limit is reached.

    ``tick`` is the once-per-second interval callback. It only advances ``elapsed_seconds``
    while the app is visible; background seconds are dropped rather than caught up later.
    ``on_time_up`` fires at most once per timer, the first time ``elapsed_seconds`` reaches
    ``time_limit_minutes * 60``, and only when the limit is positive. ``close`` reports the
    wall-clock length of the session (which includes hidden time) through
    ``record_session_end``.
    """

    def __init__(
        self,
        record_session_end: Callable[[int], object],
        time_limit_minutes: int = 0,
        on_time_up: Optional[Callable[[], object]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._record_session_end = record_session_end
        self.time_limit_minutes = time_limit_minutes
        self.on_time_up = on_time_up
        self._clock = clock
        self._started_at = clock()
        self.elapsed_seconds = 0
        self.is_active = True
        self.time_up_fired = False
        self.closed = False

    def set_visibility(self, visible: bool) -> None:
        self.is_active = visible

    def set_time_limit(self, minutes: int) -> None:
        """Change the limit mid-session; an already elapsed limit fires immediately."""
        self.time_limit_minutes = minutes
        self._check_limit()

    def tick(self) -> None:
        if self.closed or not self.is_active:
            return
        self.elapsed_seconds += 1
        self._check_limit()

    def reset_timer(self) -> None:
        """Zero the foreground counter. The time-up callback is not re-armed."""
        self.elapsed_seconds = 0

    def _check_limit(self) -> None:
        if self.time_up_fired or self.time_limit_minutes <= 0:
            return
        if self.elapsed_seconds >= self.time_limit_minutes * 60:
            self.time_up_fired = True
            logger.info(
                "session_time_up",
                elapsed_seconds=self.elapsed_seconds,
                limit_minutes=self.time_limit_minutes,
            )
            if self.on_time_up is not None:
                self.on_time_up()

    def wall_clock_seconds(self) -> int:
        return math.floor(self._clock() - self._started_at)

    def close(self) -> int:
        """Report the session length once and stop counting. Returns the seconds reported."""
        if self.closed:
            return 0
        self.closed = True
        duration = self.wall_clock_seconds()
        self._record_session_end(duration)
        logger.info("session_ended", duration_seconds=duration, foreground_seconds=self.elapsed_seconds)
        return duration

    def __enter__(self) -> "SessionTimer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SessionTicker:
    """Drive :meth:`SessionTimer.tick` once per second from a background daemon thread."""

    def __init__(self, timer: SessionTimer, lock: Optional[threading.Lock] = None, interval: float = TICK_SECONDS):
        self.timer = timer
        self.lock = lock or threading.Lock()
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            with self.lock:
                self.timer.tick()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="sprouts-session-ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval * 2)
            self._thread = None
