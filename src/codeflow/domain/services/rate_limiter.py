"""Sliding-window rate limiter.

Used to cap how often a user can send code to the remote execution
service. Attempts are tracked in memory per key.
"""

import threading
import time
from typing import Callable, Iterable


class RateLimiter:
    """Thread-safe sliding-window rate limiter.

    Keys are free-form, typically ``{user_id}:{window_name}``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the limiter.

        Args:
            clock: Monotonic time source in seconds.
        """
        self._clock = clock
        self._attempts: dict[str, list[float]] = {}
        self._lock = threading.RLock()

    def check(self, key: str, max_attempts: int, window_seconds: float) -> bool:
        """Record an attempt for ``key`` if it is within the limit.

        Args:
            key: Rate-limit bucket.
            max_attempts: Attempts allowed inside the window.
            window_seconds: Window length in seconds.

        Returns:
            True if the attempt was allowed (and recorded), False otherwise.
        """
        return self.check_many([(key, max_attempts, window_seconds)])

    def check_many(self, limits: Iterable[tuple[str, int, float]]) -> bool:
        """Record one attempt against several buckets at once.

        The attempt is recorded in every bucket only when all of them have
        room. A rejection leaves every bucket untouched.

        Args:
            limits: ``(key, max_attempts, window_seconds)`` triples.

        Returns:
            True if the attempt was allowed (and recorded), False otherwise.
        """
        now = self._clock()
        with self._lock:
            pruned: dict[str, list[float]] = {}
            allowed = True
            for key, max_attempts, window_seconds in limits:
                recent = [t for t in self._attempts.get(key, []) if now - t < window_seconds]
                pruned[key] = recent
                if len(recent) >= max_attempts:
                    allowed = False
            if allowed:
                for recent in pruned.values():
                    recent.append(now)
            self._attempts.update(pruned)
            return allowed

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)
