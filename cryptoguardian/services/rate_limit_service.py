"""Rate limiting services for upstream providers and inbound clients."""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class ProviderRateLimiter:
    """Process-wide minimum spacing between calls to the same provider.

    Every provider name has its own "time of last call"; a caller waits out
    the remainder of the interval before issuing its request. Callers for the
    same provider are serialized, so concurrent requests are spaced too.
    """

    def __init__(
        self,
        min_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            min_interval: Minimum seconds between two calls to one provider.
            clock: Monotonic time source.
            sleep: Coroutine used to wait, replaceable in tests.
        """
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def wait(self, provider: str) -> None:
        """Wait until a call to ``provider`` is allowed, then record it."""
        lock = self._locks.setdefault(provider, asyncio.Lock())
        async with lock:
            last = self._last_call.get(provider)
            if last is not None:
                elapsed = self._clock() - last
                if elapsed < self._min_interval:
                    wait_time = self._min_interval - elapsed
                    logger.debug(f"[RateLimit] {provider}: waiting {wait_time:.3f}s")
                    await self._sleep(wait_time)
            self._last_call[provider] = self._clock()

    def last_call(self, provider: str) -> float | None:
        """Time of the last recorded call to ``provider``."""
        return self._last_call.get(provider)


@dataclass
class ClientWindow:
    """Request counter for one client within a fixed window."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate-limit check."""

    allowed: bool
    remaining: int
    retry_after: int = 0


class ClientRateLimiter:
    """Fixed-window request limiter keyed by client IP.

    Expired windows are removed by :meth:`sweep`, which the application runs
    periodically.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._store: dict[str, ClientWindow] = {}

    def hit(self, client_id: str) -> RateLimitDecision:
        """Count a request from ``client_id`` and decide whether it may proceed."""
        now = self._clock()
        window = self._store.get(client_id)

        if window is None or now > window.reset_at:
            self._store[client_id] = ClientWindow(count=1, reset_at=now + self._window)
            return RateLimitDecision(allowed=True, remaining=self._max_requests - 1)

        if window.count >= self._max_requests:
            retry_after = max(1, math.ceil(window.reset_at - now))
            return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

        window.count += 1
        return RateLimitDecision(allowed=True, remaining=self._max_requests - window.count)

    def sweep(self) -> int:
        """Drop expired windows and return how many were removed."""
        now = self._clock()
        expired = [client for client, window in self._store.items() if now > window.reset_at]
        for client in expired:
            del self._store[client]
        if expired:
            logger.debug(f"[RateLimit] Swept {len(expired)} expired client windows")
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)

    async def run_sweeper(self, interval: float) -> None:
        """Sweep expired windows every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.sweep()
