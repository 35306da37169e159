"""
Rate Limiting
In-process fixed-window limiter for sensitive operations such as payroll generation
"""
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional


@dataclass
class RateLimitResult:
    allowed: bool
    remaining_attempts: int
    reset_at: Optional[datetime] = None
    blocked_until: Optional[datetime] = None


@dataclass
class _Entry:
    attempts: int
    first_attempt: float
    block_expiry: Optional[float] = None


class RateLimiter:
    """Counts attempts per key within a window; exceeding the limit blocks the key.

    The block lasts ``block_seconds`` (twice the window when not given).
    Lapsed entries are pruned at most every ``cleanup_interval`` seconds.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        block_seconds: Optional[float] = None,
        cleanup_interval: float = 900,
        clock: Callable[[], float] = time.time,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.block_seconds = block_seconds if block_seconds is not None else window_seconds * 2
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._last_cleanup = clock()

    def _to_datetime(self, ts: float) -> datetime:
        return datetime.now() + timedelta(seconds=ts - self._clock())

    def check(self, key: str) -> RateLimitResult:
        now = self._clock()
        if now - self._last_cleanup >= self.cleanup_interval:
            self.cleanup()
        entry = self._entries.get(key)

        if entry and entry.block_expiry is not None:
            if now < entry.block_expiry:
                return RateLimitResult(False, 0, blocked_until=self._to_datetime(entry.block_expiry))
            entry = None

        if entry is None or now - entry.first_attempt > self.window_seconds:
            self._entries[key] = _Entry(attempts=1, first_attempt=now)
            return RateLimitResult(
                True,
                self.max_attempts - 1,
                reset_at=self._to_datetime(now + self.window_seconds),
            )

        entry.attempts += 1
        if entry.attempts > self.max_attempts:
            entry.block_expiry = now + self.block_seconds
            return RateLimitResult(False, 0, blocked_until=self._to_datetime(entry.block_expiry))

        return RateLimitResult(
            True,
            self.max_attempts - entry.attempts,
            reset_at=self._to_datetime(entry.first_attempt + self.window_seconds),
        )

    def clear(self, key: str) -> None:
        self._entries.pop(key, None)

    def cleanup(self) -> None:
        """Drop entries whose window and block have both lapsed."""
        now = self._clock()
        for key in list(self._entries):
            entry = self._entries[key]
            window_over = now - entry.first_attempt > self.window_seconds
            block_over = entry.block_expiry is None or now >= entry.block_expiry
            if window_over and block_over:
                del self._entries[key]
        self._last_cleanup = now
