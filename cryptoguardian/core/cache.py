"""Cache backend interface and key scheme."""

from abc import ABC, abstractmethod
from typing import Any

KEY_PREFIX = "guardian"


class CacheBackend(ABC):
    """Key/value store with per-entry expiry.

    Holds two kinds of values, both JSON-friendly: dumped address snapshots
    and float spot prices. Backends treat their own failures as misses
    rather than raising into the request path.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the live value for ``key``, or None on a miss or expiry."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Store ``value`` under ``key``, replacing what was there.

        Args:
            key: Cache key, normally built with the key helpers below.
            value: JSON-friendly value.
            ttl: Seconds until expiry; None means the backend default.

        Returns:
            False if the backend could not store the value.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``; False if it was not present."""
        ...

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every key under the application prefix."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Health check used by the /health endpoint."""
        ...

    def _make_key(self, namespace: str, *parts: str) -> str:
        return ":".join((KEY_PREFIX, namespace, *parts))

    def address_key(self, chain: str, address: str) -> str:
        """Key for an address snapshot.

        The address is used as given: bitcoin addresses are case-sensitive
        and EVM addresses are already lowercased by the classifier.
        """
        return self._make_key("address", chain, address)

    def price_key(self, chain: str) -> str:
        """Key for a chain's USD spot price."""
        return self._make_key("price", chain)
