# =============================================================================
# lib/rate_limiter.py - Sliding Window Rate Limiter
# =============================================================================
# Blocking limiter used by the mail transport: at most `limit` acquisitions
# in any `window_seconds` span. Callers past the limit wait for the oldest
# slot to expire instead of being rejected.
# =============================================================================

import logging
import threading
import time
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Thread-safe sliding window limiter.

    Example:
        limiter = SlidingWindowRateLimiter(limit=5, window_seconds=20)
        limiter.acquire()  # returns immediately for the first five calls
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._stamps: deque[float] = deque()
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        while self._stamps and now - self._stamps[0] >= self.window_seconds:
            self._stamps.popleft()

    def acquire(self) -> float:
        """
        Take one slot, sleeping until one is free.

        Returns:
            Seconds spent waiting (0.0 when a slot was free)
        """
        waited = 0.0
        while True:
            with self._lock:
                now = self._clock()
                self._prune(now)
                if len(self._stamps) < self.limit:
                    self._stamps.append(now)
                    return waited
                delay = self.window_seconds - (now - self._stamps[0])

            logger.debug(f"Rate limit reached, waiting {delay:.2f}s for a send slot")
            self._sleep(delay)
            waited += delay

    @property
    def in_window(self) -> int:
        """Number of slots taken in the current window."""
        with self._lock:
            self._prune(self._clock())
            return len(self._stamps)
