from __future__ import annotations

"""Drift-resistant countdown timer.

Remaining time is always recomputed from the clock (`total - elapsed`), never
by decrementing a counter per tick, so late or skipped ticks do not make the
countdown run slow. Ticks run on a chain of daemon threading.Timer objects;
with `background=False` the owner drives `tick()` itself.
"""

import math
import threading
import time
from typing import Callable, Optional


class CountdownTimer:
    def __init__(
        self,
        total_s: int,
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expire: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        interval_s: float = 0.25,
        background: bool = True,
    ) -> None:
        self.total_s = int(total_s)
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.clock = clock
        self.interval_s = float(interval_s)
        self.background = background
        self.started_at: Optional[float] = None
        self.time_left = self.total_s
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._running = False
        self._expired = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def expired(self) -> bool:
        return self._expired

    def start(self, started_at: Optional[float] = None) -> float:
        """Anchor the countdown at `started_at` (default: now) and begin ticking."""
        with self._lock:
            self.started_at = self.clock() if started_at is None else float(started_at)
            self._running = True
            self._expired = False
            self._arm()
        return self.started_at

    def _arm(self) -> None:
        if not self.background or not self._running:
            return
        if self._timer:
            self._timer.cancel()
        self._timer = threading.Timer(self.interval_s, self._on_timer)
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self) -> None:
        self.tick()
        with self._lock:
            self._arm()

    def remaining(self) -> int:
        if self.started_at is None:
            return self.total_s
        elapsed = self.clock() - self.started_at
        return max(0, int(math.ceil(self.total_s - elapsed)))

    def tick(self) -> int:
        """Recompute time left; fires on_expire exactly once when it hits zero."""
        fire = False
        with self._lock:
            if not self._running:
                return self.time_left
            self.time_left = self.remaining()
            left = self.time_left
            if left <= 0:
                self._running = False
                self._expired = True
                fire = True
                if self._timer:
                    self._timer.cancel()
                    self._timer = None
        if self.on_tick:
            self.on_tick(left)
        if fire and self.on_expire:
            self.on_expire()
        return left

    def cancel(self) -> None:
        with self._lock:
            self._running = False
            if self._timer:
                self._timer.cancel()
                self._timer = None


def format_time(seconds: int) -> str:
    """Render seconds as m:ss for the timer display."""
    seconds = max(0, int(seconds))
    m, s = divmod(seconds, 60)
    return f"{m}:{s:02d}"
