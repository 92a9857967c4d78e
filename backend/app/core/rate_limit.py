"""
Fixed-window rate limiting for AI-consuming endpoints (workout generation).
In-process counters per identifier; one RateLimiter instance per window configuration.
A window resets lazily on the first check at or after its reset time.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.config import settings

logger = logging.getLogger(__name__)

GENERATION_MINUTE = "generation_minute"
GENERATION_DAILY = "generation_daily"


@dataclass
class _Window:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds


class RateLimiter:
    """Admit at most `limit` checks per identifier within each `window_seconds` window."""

    def __init__(
        self,
        name: str,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._store: dict[str, _Window] = {}
        # read-check-increment must not interleave between concurrent requests
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def check(self, identifier: str) -> RateLimitResult:
        """Consume one unit for `identifier` if the current window has room."""
        with self._lock:
            now = self._clock()
            window = self._store.get(identifier)
            if window is None or now >= window.reset_at:
                window = _Window(count=0, reset_at=now + self.window_seconds)
                self._store[identifier] = window
            if window.count >= self.limit:
                return RateLimitResult(
                    allowed=False, limit=self.limit, remaining=0, reset_at=window.reset_at
                )
            window.count += 1
            return RateLimitResult(
                allowed=True,
                limit=self.limit,
                remaining=self.limit - window.count,
                reset_at=window.reset_at,
            )

    def peek(self, identifier: str) -> RateLimitResult:
        """Current counters for `identifier` without consuming."""
        with self._lock:
            now = self._clock()
            window = self._store.get(identifier)
            if window is None or now >= window.reset_at:
                return RateLimitResult(
                    allowed=True,
                    limit=self.limit,
                    remaining=self.limit,
                    reset_at=now + self.window_seconds,
                )
            remaining = max(0, self.limit - window.count)
            return RateLimitResult(
                allowed=remaining > 0, limit=self.limit, remaining=remaining, reset_at=window.reset_at
            )

    def cleanup(self) -> int:
        """Drop entries whose window has elapsed. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, window in self._store.items() if now >= window.reset_at]
            for key in expired:
                del self._store[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)


def build_generation_limiters(clock: Callable[[], float] = time.time) -> list[RateLimiter]:
    """Short window first, then long window: the order the quota gate evaluates them."""
    return [
        RateLimiter(
            GENERATION_MINUTE,
            settings.generation_minute_limit,
            settings.generation_minute_window_seconds,
            clock=clock,
        ),
        RateLimiter(
            GENERATION_DAILY,
            settings.generation_daily_limit,
            settings.generation_daily_window_seconds,
            clock=clock,
        ),
    ]


# Process-wide limiters, created on first use
_generation_limiters: list[RateLimiter] | None = None


def get_generation_limiters() -> list[RateLimiter]:
    """Return the process-wide generation limiters (FastAPI dependency; override in tests)."""
    global _generation_limiters
    if _generation_limiters is None:
        _generation_limiters = build_generation_limiters()
    return _generation_limiters


def reset_generation_limiters() -> None:
    """Forget the process-wide limiters (next get_generation_limiters() builds fresh ones)."""
    global _generation_limiters
    _generation_limiters = None


def cleanup_generation_limiters() -> None:
    """Scheduled sweep of elapsed windows; memory only, never touches active windows."""
    if _generation_limiters is None:
        return
    for limiter in _generation_limiters:
        removed = limiter.cleanup()
        if removed:
            logger.debug("Rate limit: swept %d expired %s windows", removed, limiter.name)
