"""Etherscan-family explorer provider for EVM chains."""

import logging
from typing import Any

import httpx

from cryptoguardian.constants import EVM_CHAINS, SUPPORTED_CHAINS, ChainId
from cryptoguardian.core.exceptions import GuardianError, ProviderError
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.providers.base import HTTPDataProvider
from cryptoguardian.services.rate_limit_service import ProviderRateLimiter

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "YourApiKeyToken"


class EtherscanProvider(HTTPDataProvider):
    """
    Etherscan and its sibling explorers (BscScan, PolygonScan, Arbiscan).

    Features:
    - Several API keys tried in order; the first successful balance wins
    - Best-effort transaction count through the explorer's JSON-RPC proxy

    Supported chains:
    - Ethereum, BNB Smart Chain, Polygon, Arbitrum
    """

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter,
        api_keys: list[str] | None = None,
        base_urls: dict[ChainId, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the explorer provider.

        Args:
            rate_limiter: Process-wide per-provider spacing gate.
            api_keys: Keys tried in order; an empty key uses the public placeholder.
            base_urls: Explorer API base URL per chain, defaults from chain config.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        super().__init__(rate_limiter, timeout=timeout, transport=transport)
        self._api_keys = api_keys or [""]
        self._base_urls = base_urls or {
            chain: SUPPORTED_CHAINS[chain].explorer_api_url for chain in EVM_CHAINS
        }

    @property
    def name(self) -> str:
        """Provider name identifier."""
        return "etherscan"

    @property
    def supported_chains(self) -> frozenset[ChainId]:
        """List of supported blockchain identifiers."""
        return EVM_CHAINS

    def _api_url(self, chain: ChainId) -> str:
        return f"{self._base_urls[chain].rstrip('/')}/api"

    async def _fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        """Try each API key until one returns a balance."""
        url = self._api_url(chain)

        for index, key in enumerate(self._api_keys, start=1):
            api_key = key or PLACEHOLDER_API_KEY
            try:
                data = await self._request(
                    url,
                    {
                        "module": "account",
                        "action": "balance",
                        "address": address,
                        "tag": "latest",
                        "apikey": api_key,
                    },
                )
            except GuardianError as e:
                logger.warning(f"[{self.name}] Key {index}/{len(self._api_keys)} failed: {e.message}")
                continue

            if not isinstance(data, dict) or data.get("status") != "1":
                message = data.get("message") if isinstance(data, dict) else "bad payload"
                logger.warning(f"[{self.name}] Key {index}/{len(self._api_keys)} rejected: {message}")
                continue

            try:
                balance = str(int(data.get("result") or 0))
            except (TypeError, ValueError):
                logger.warning(
                    f"[{self.name}] Key {index}/{len(self._api_keys)} returned "
                    f"non-numeric balance: {data.get('result')!r}"
                )
                continue

            transaction_count = await self._fetch_transaction_count(url, address, api_key)
            return AddressSnapshot(
                address=address,
                balance=balance,
                transaction_count=transaction_count,
                source=self.name,
            )

        raise ProviderError(self.name, f"all {len(self._api_keys)} API keys failed")

    async def _fetch_transaction_count(
        self, url: str, address: str, api_key: str
    ) -> int | None:
        """Sent-transaction count (account nonce) via the JSON-RPC proxy, or None."""
        try:
            data: Any = await self._request(
                url,
                {
                    "module": "proxy",
                    "action": "eth_getTransactionCount",
                    "address": address,
                    "tag": "latest",
                    "apikey": api_key,
                },
            )
            return int(data["result"], 16)
        except (GuardianError, KeyError, TypeError, ValueError) as e:
            logger.debug(f"[{self.name}] Transaction count unavailable: {e}")
            return None
