"""
Outbound request throttle for catalogue clients
"""
import asyncio
import time
from collections import deque
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


class AsyncRateLimiter:
    """
    Rate limiter that enforces a requests per minute limit
    Uses sliding window algorithm; waiting happens with ``asyncio.sleep`` so
    other coroutines keep running.
    """

    def __init__(
        self,
        requests_per_minute: int,
        clock: Callable[[], float] = time.monotonic,
        window_seconds: float = 60.0,
    ):
        """
        Initialize rate limiter

        Args:
            requests_per_minute: Maximum number of requests allowed per window (0 disables)
            clock: Monotonic time source, injectable for tests
            window_seconds: Length of the sliding window
        """
        self.requests_per_minute = requests_per_minute
        self.window_seconds = window_seconds
        self._clock = clock
        self.request_times: deque = deque()
        self.last_request_time: Optional[float] = None
        self.total_waited: float = 0.0

    def _cleanup_old_requests(self, current_time: float) -> None:
        """Remove requests that fell out of the window"""
        while self.request_times and current_time - self.request_times[0] >= self.window_seconds:
            self.request_times.popleft()

    def _reserve_delay(self) -> float:
        """Record a slot and return how long the caller must wait before using it."""
        current_time = self._clock()
        self._cleanup_old_requests(current_time)

        start_at = current_time
        if len(self.request_times) >= self.requests_per_minute:
            # The slot frees up when the request that opened this window expires
            start_at = max(current_time, self.request_times[-self.requests_per_minute] + self.window_seconds)

        self.request_times.append(start_at)
        self.last_request_time = start_at
        return start_at - current_time

    async def acquire(self) -> None:
        """
        Wait if necessary to respect rate limit
        Should be awaited before each request
        """
        if not self.requests_per_minute:
            return

        wait_time = self._reserve_delay()
        if wait_time > 0:
            logger.debug("Rate limit reached. Waiting %.2f seconds", wait_time)
            self.total_waited += wait_time
            await asyncio.sleep(wait_time)

    def get_stats(self) -> dict:
        """Get current rate limiter statistics"""
        self._cleanup_old_requests(self._clock())

        return {
            'requests_in_window': len(self.request_times),
            'limit': self.requests_per_minute,
            'last_request_time': self.last_request_time,
            'total_waited': self.total_waited,
        }
