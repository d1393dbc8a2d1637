"""Process-local cache backend."""

import asyncio
import logging
import time
from typing import Any, Callable, NamedTuple

from cryptoguardian.core.cache import KEY_PREFIX, CacheBackend

logger = logging.getLogger(__name__)


class _Slot(NamedTuple):
    value: Any
    deadline: float | None


class MemoryCacheBackend(CacheBackend):
    """Dictionary cache for a single API process.

    A stale slot is never returned: expiry is checked on every read. Writes
    also sweep expired slots out of the dictionary, at most once per
    ``sweep_interval`` seconds, so addresses that are checked once and never
    read again do not accumulate.
    """

    def __init__(
        self,
        default_ttl: int = 300,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 60.0,
    ) -> None:
        """
        Args:
            default_ttl: Expiry used when a caller passes no TTL (5 minutes).
            clock: Monotonic time source, replaceable in tests.
            sweep_interval: Minimum seconds between sweeps triggered by writes.
        """
        self._default_ttl = default_ttl
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        self._slots: dict[str, _Slot] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._slots)

    def _prune(self, now: float) -> int:
        # Caller holds the lock.
        stale = [
            key
            for key, slot in self._slots.items()
            if slot.deadline is not None and slot.deadline <= now
        ]
        for key in stale:
            del self._slots[key]
        self._next_sweep = now + self._sweep_interval
        return len(stale)

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                return None
            if slot.deadline is not None and slot.deadline <= self._clock():
                del self._slots[key]
                return None
            return slot.value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        seconds = self._default_ttl if ttl is None else ttl
        now = self._clock()
        deadline = now + seconds if seconds else None
        async with self._lock:
            if now >= self._next_sweep:
                self._prune(now)
            self._slots[key] = _Slot(value, deadline)
        return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._slots.pop(key, None) is not None

    async def clear(self) -> bool:
        prefix = f"{KEY_PREFIX}:"
        async with self._lock:
            owned = [key for key in self._slots if key.startswith(prefix)]
            for key in owned:
                del self._slots[key]
        logger.debug(f"[MemoryCache] cleared {len(owned)} entries")
        return True

    async def cleanup_expired(self) -> int:
        """Drop every expired slot now and return how many were removed."""
        async with self._lock:
            removed = self._prune(self._clock())
        if removed:
            logger.debug(f"[MemoryCache] expired {removed} entries")
        return removed

    async def close(self) -> None:
        async with self._lock:
            self._slots.clear()

    async def ping(self) -> bool:
        return True
