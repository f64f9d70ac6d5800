"""Sliding-window rate limiting matching Riot API's documented limits."""
import asyncio
import time
from collections import deque
from typing import Deque, List, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

# Riot's application windows: 1 second and 120 seconds.
SHORT_WINDOW_S = 1.0
LONG_WINDOW_S = 120.0


class RateLimiter:
    """
    Sliding-window rate limiter over any number of (limit, window) pairs.
    A request is admitted only when every window has room for it.
    """

    def __init__(self, windows: Sequence[Tuple[int, float]]):
        if not windows:
            raise ValueError("RateLimiter needs at least one window")
        self.windows: List[Tuple[int, float]] = [(int(n), float(w)) for n, w in windows]
        self._times: List[Deque[float]] = [deque() for _ in self.windows]
        self._lock = asyncio.Lock()

    @classmethod
    def per_second_and_two_minutes(cls, per_1_sec: int, per_2_min: int) -> 'RateLimiter':
        return cls([(per_1_sec, SHORT_WINDOW_S), (per_2_min, LONG_WINDOW_S)])

    def _evict(self, now: float) -> None:
        for (_, window), times in zip(self.windows, self._times):
            while times and now - times[0] > window:
                times.popleft()

    async def acquire(self) -> None:
        async with self._lock:
            while True:
                now = time.monotonic()
                self._evict(now)

                wait = 0.0
                for (limit, window), times in zip(self.windows, self._times):
                    if len(times) >= limit and times:
                        wait = max(wait, window - (now - times[0]) + 0.01)

                if wait <= 0.0:
                    for times in self._times:
                        times.append(now)
                    return

                logger.debug(f"Rate limit - waiting {wait:.2f}s")
                await asyncio.sleep(max(wait, 0.05))

    def get_status(self) -> List[Tuple[int, int, float]]:
        """(used, limit, window) for each window."""
        now = time.monotonic()
        return [
            (sum(1 for t in times if now - t <= window), limit, window)
            for (limit, window), times in zip(self.windows, self._times)
        ]

    async def reset(self) -> None:
        async with self._lock:
            for times in self._times:
                times.clear()


class EndpointRateLimiter:
    """Per-endpoint rate limiters with a shared default."""

    def __init__(self):
        self.limiters: dict[str, RateLimiter] = {}
        self._default: RateLimiter | None = None

    def set_default_limiter(self, requests_per_1_sec: int, requests_per_2_min: int) -> None:
        self._default = RateLimiter.per_second_and_two_minutes(requests_per_1_sec, requests_per_2_min)

    def add_endpoint_limiter(self, endpoint: str, requests_per_1_sec: int, requests_per_2_min: int) -> None:
        self.limiters[endpoint] = RateLimiter.per_second_and_two_minutes(
            requests_per_1_sec, requests_per_2_min
        )

    def get(self, endpoint: str = "default") -> RateLimiter | None:
        return self.limiters.get(endpoint, self._default)

    async def acquire(self, endpoint: str = "default") -> None:
        limiter = self.get(endpoint)
        if limiter:
            await limiter.acquire()

    async def reset_endpoint(self, endpoint: str = "default") -> None:
        limiter = self.get(endpoint)
        if limiter:
            await limiter.reset()
