from __future__ import annotations

import time
from collections.abc import Callable

MAX_SCANS_PER_WINDOW = 5
RATE_LIMIT_WINDOW_SECONDS = 10.0
SCAN_COOLDOWN_SECONDS = 0.5


class RateLimiter:
    """Sliding-window scan limiter with a short per-attempt cooldown.

    The window guards against abuse; the cooldown is a debounce after every
    attempted scan. ``can_scan`` needs both to pass.
    """

    def __init__(
        self,
        max_scans: int = MAX_SCANS_PER_WINDOW,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        cooldown_seconds: float = SCAN_COOLDOWN_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.max_scans = max(1, max_scans)
        self.window_seconds = window_seconds
        self.cooldown_seconds = max(0.0, cooldown_seconds)
        self._clock = clock or time.monotonic
        self.scan_count = 0
        self.last_scan_time: float | None = None
        self._cooldown_until: float | None = None

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def is_rate_limited(self, now: float | None = None) -> bool:
        if self._cooldown_until is None:
            return False
        return self._now(now) < self._cooldown_until

    def within_window_limit(self, now: float | None = None) -> bool:
        current = self._now(now)
        if self.last_scan_time is None or current - self.last_scan_time > self.window_seconds:
            self.scan_count = 0
            return True
        return self.scan_count < self.max_scans

    def can_scan(self, now: float | None = None) -> bool:
        current = self._now(now)
        if self.is_rate_limited(current):
            return False
        return self.within_window_limit(current)

    def record_scan(self, now: float | None = None) -> None:
        self.scan_count += 1
        self.last_scan_time = self._now(now)

    def note_attempt(self, now: float | None = None) -> None:
        self._cooldown_until = self._now(now) + self.cooldown_seconds

    def reset(self) -> None:
        self.scan_count = 0
        self.last_scan_time = None
        self._cooldown_until = None
