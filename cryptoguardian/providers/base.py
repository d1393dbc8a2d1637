"""Shared HTTP plumbing for explorer-backed providers."""

import logging
from abc import abstractmethod
from typing import Any

import httpx

from cryptoguardian.constants import ChainId
from cryptoguardian.core.exceptions import (
    APIRateLimitError,
    APITimeoutError,
    GuardianError,
    ProviderError,
    UnsupportedChainError,
)
from cryptoguardian.core.provider import DataProvider
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.services.rate_limit_service import ProviderRateLimiter

logger = logging.getLogger(__name__)


class HTTPDataProvider(DataProvider):
    """
    Base class for providers that talk to a JSON explorer API.

    Subclasses implement :meth:`_fetch`, which may raise; :meth:`fetch`
    validates the chain, converts every failure to ``None`` and logs it.
    Every HTTP call waits on the shared provider rate limiter first.
    """

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            rate_limiter: Process-wide per-provider spacing gate.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self._rate_limiter = rate_limiter
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._request_count = 0

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": "Crypto-Guardian/1.0",
                },
                transport=self._transport,
            )
        return self._client

    async def _request(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a rate-limited GET request and decode the JSON body.

        Raises:
            APIRateLimitError: On HTTP 429.
            APITimeoutError: If the request times out.
            ProviderError: On any other non-2xx status or undecodable body.
        """
        await self._rate_limiter.wait(self.name)

        client = await self._get_client()
        self._request_count += 1
        logger.debug(f"[{self.name}] GET {url}")

        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise APITimeoutError(self.name, self._timeout) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"transport error: {e}") from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise APIRateLimitError(self.name, float(retry_after) if retry_after else None)
        if response.status_code >= 400:
            raise ProviderError(self.name, f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(self.name, "malformed JSON payload") from e

    async def fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        """Fetch a snapshot, converting every failure to None."""
        try:
            if not self.supports_chain(chain):
                raise UnsupportedChainError(chain.value, self.name)
            snapshot = await self._fetch(address, chain)
        except UnsupportedChainError:
            logger.debug(f"[{self.name}] Skipping unsupported chain {chain.value}")
            return None
        except GuardianError as e:
            logger.warning(f"[{self.name}] {e.code} for {address[:16]}...: {e.message}")
            return None
        except Exception as e:
            logger.warning(f"[{self.name}] Unexpected error for {address[:16]}...: {e!r}")
            return None

        if snapshot is not None:
            logger.info(
                f"[{self.name}] ✓ {address[:16]}... balance={snapshot.balance} "
                f"tx_count={snapshot.transaction_count}"
            )
        return snapshot

    @abstractmethod
    async def _fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        """Provider-specific lookup; may raise."""
        ...

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def get_request_count(self) -> int:
        """Get total number of API requests made."""
        return self._request_count
