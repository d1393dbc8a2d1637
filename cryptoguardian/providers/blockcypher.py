"""BlockCypher API provider for Bitcoin and Ethereum."""

import logging

import httpx

from cryptoguardian.constants import ChainId
from cryptoguardian.core.exceptions import ProviderError
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.providers.base import HTTPDataProvider
from cryptoguardian.services.rate_limit_service import ProviderRateLimiter

logger = logging.getLogger(__name__)


class BlockCypherProvider(HTTPDataProvider):
    """
    BlockCypher provider covering Bitcoin and Ethereum mainnets.

    Returns balance, transaction count and, for Bitcoin, the total amount
    ever received. Free tier: about 3 requests/second without a token.
    """

    NETWORKS: dict[ChainId, str] = {
        ChainId.BITCOIN: "btc/main",
        ChainId.ETHEREUM: "eth/main",
    }

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter,
        base_url: str = "https://api.blockcypher.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(rate_limiter, timeout=timeout, transport=transport)
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        """Provider name identifier."""
        return "blockcypher"

    @property
    def supported_chains(self) -> frozenset[ChainId]:
        """List of supported blockchain identifiers."""
        return frozenset(self.NETWORKS)

    async def _fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        """Fetch the address balance endpoint for the chain's network."""
        network = self.NETWORKS[chain]
        # BlockCypher expects ethereum addresses without the 0x prefix
        lookup = address[2:] if chain == ChainId.ETHEREUM else address

        data = await self._request(f"{self._base_url}/{network}/addrs/{lookup}/balance")
        if not isinstance(data, dict) or "balance" not in data:
            raise ProviderError(self.name, "balance missing from response")

        total_received = None
        if chain == ChainId.BITCOIN and data.get("total_received") is not None:
            total_received = str(int(data["total_received"]))

        snapshot = AddressSnapshot(
            address=address,
            balance=str(int(data["balance"])),
            transaction_count=int(data.get("n_tx") or 0),
            total_received=total_received,
            source=self.name,
        )
        logger.debug(
            f"[{self.name}] {network} {address[:16]}... balance={snapshot.balance} "
            f"n_tx={snapshot.transaction_count}"
        )
        return snapshot
