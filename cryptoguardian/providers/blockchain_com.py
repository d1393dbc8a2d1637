"""Blockchain.com API provider implementation for Bitcoin."""

import logging

import httpx

from cryptoguardian.constants import ChainId
from cryptoguardian.core.exceptions import ProviderError
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.providers.base import HTTPDataProvider
from cryptoguardian.services.rate_limit_service import ProviderRateLimiter

logger = logging.getLogger(__name__)


class BlockchainComProvider(HTTPDataProvider):
    """
    Blockchain.com explorer provider.

    Features:
    - Free API with no key required
    - Final balance, transaction count and total received per address

    Supported chains:
    - Bitcoin (BTC) only

    API Documentation: https://www.blockchain.com/explorer/api
    """

    SUPPORTED_CHAINS = frozenset({ChainId.BITCOIN})

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter,
        base_url: str = "https://blockchain.info",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(rate_limiter, timeout=timeout, transport=transport)
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        """Provider name identifier."""
        return "blockchain_com"

    @property
    def supported_chains(self) -> frozenset[ChainId]:
        """List of supported blockchain identifiers."""
        return self.SUPPORTED_CHAINS

    async def _fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        """Fetch the address summary without transaction bodies."""
        data = await self._request(
            f"{self._base_url}/rawaddr/{address}",
            {"limit": 0, "cors": "true"},
        )
        if not isinstance(data, dict) or "final_balance" not in data:
            raise ProviderError(self.name, "address summary missing final_balance")

        snapshot = AddressSnapshot(
            address=address,
            balance=str(int(data["final_balance"])),
            transaction_count=int(data.get("n_tx") or 0),
            total_received=str(int(data.get("total_received") or 0)),
            source=self.name,
        )
        logger.debug(
            f"[{self.name}] {address[:16]}... balance={snapshot.balance} "
            f"n_tx={snapshot.transaction_count}"
        )
        return snapshot
