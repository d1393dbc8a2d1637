"""USD spot prices and balance conversion."""

import asyncio
import logging
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

import httpx

from cryptoguardian.constants import SUPPORTED_CHAINS, ChainId
from cryptoguardian.core.cache import CacheBackend

logger = logging.getLogger(__name__)


class PriceOracle:
    """
    Fetches and caches USD spot prices per chain.

    Lookup order:
    - Cache (5 minutes; a failed lookup caches 0 for 1 minute)
    - CoinGecko simple price API
    - CryptoCompare price API

    Conversion substitutes a static per-chain price when both sources fail,
    so the figure is approximate rather than "$0".
    """

    def __init__(
        self,
        cache: CacheBackend,
        coingecko_base_url: str = "https://api.coingecko.com/api/v3",
        cryptocompare_base_url: str = "https://min-api.cryptocompare.com",
        timeout: float = 10.0,
        price_ttl: int = 300,
        failure_ttl: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the price oracle.

        Args:
            cache: Cache backend shared with the rest of the application.
            coingecko_base_url: Primary price API base URL.
            cryptocompare_base_url: Secondary price API base URL.
            timeout: Per-request timeout in seconds.
            price_ttl: Cache TTL for a successful price.
            failure_ttl: Cache TTL for a failed (zero) price.
            transport: Optional httpx transport, used by tests.
        """
        self._cache = cache
        self._coingecko_base_url = coingecko_base_url.rstrip("/")
        self._cryptocompare_base_url = cryptocompare_base_url.rstrip("/")
        self._timeout = timeout
        self._price_ttl = price_ttl
        self._failure_ttl = failure_ttl
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._background_tasks: set[asyncio.Task] = set()

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

    async def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        client = await self._get_client()
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def _fetch_coingecko(self, chain: ChainId) -> float:
        """Query the primary price source; 0 on any failure."""
        coin_id = SUPPORTED_CHAINS[chain].coingecko_id
        try:
            data = await self._get_json(
                f"{self._coingecko_base_url}/simple/price",
                {"ids": coin_id, "vs_currencies": "usd"},
            )
            return float(data[coin_id]["usd"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"[PriceOracle] CoinGecko price for {chain.value} failed: {e}")
            return 0.0

    async def _fetch_cryptocompare(self, chain: ChainId) -> float:
        """Query the secondary price source; 0 on any failure."""
        symbol = SUPPORTED_CHAINS[chain].price_symbol
        try:
            data = await self._get_json(
                f"{self._cryptocompare_base_url}/data/price",
                {"fsym": symbol, "tsyms": "USD"},
            )
            return float(data["USD"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"[PriceOracle] CryptoCompare price for {chain.value} failed: {e}")
            return 0.0

    async def get_price(self, chain: ChainId) -> float:
        """
        Get the USD spot price for a chain's native asset.

        Args:
            chain: Chain to price.

        Returns:
            Price in USD, or 0.0 if every source failed.
        """
        cache_key = self._cache.price_key(chain.value)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return float(cached)

        price = await self._fetch_coingecko(chain)
        if price <= 0:
            price = await self._fetch_cryptocompare(chain)

        if price > 0:
            await self._cache.set(cache_key, price, ttl=self._price_ttl)
            logger.debug(f"[PriceOracle] {chain.value} = ${price}")
            return price

        logger.error(f"[PriceOracle] All price sources failed for {chain.value}")
        await self._cache.set(cache_key, 0.0, ttl=self._failure_ttl)
        return 0.0

    async def convert_to_usd(self, raw_balance: str, chain: ChainId) -> str:
        """
        Convert a raw minor-unit balance (wei or satoshi) to a USD string.

        Args:
            raw_balance: Integer balance in the chain's smallest unit.
            chain: Chain the balance belongs to.

        Returns:
            USD value with two decimals, or "0" if the balance is malformed.
        """
        try:
            minor_units = int(str(raw_balance).strip())
        except (TypeError, ValueError):
            logger.warning(f"[PriceOracle] Malformed balance {raw_balance!r} for {chain.value}")
            return "0"
        if minor_units < 0:
            return "0"

        config = SUPPORTED_CHAINS[chain]
        price = Decimal(str(await self.get_price(chain)))
        if price <= 0:
            price = config.fallback_price_usd
            logger.info(
                f"[PriceOracle] Using fallback price ${price} for {chain.value}"
            )

        try:
            with localcontext() as ctx:
                ctx.prec = 80
                major_units = Decimal(minor_units).scaleb(-config.decimals)
                usd_value = (major_units * price).quantize(Decimal("0.01"))
            return f"{usd_value:f}"
        except (InvalidOperation, ArithmeticError) as e:
            logger.warning(f"[PriceOracle] USD conversion failed for {chain.value}: {e}")
            return "0"

    async def prewarm(self) -> None:
        """Fetch prices for every supported chain, logging failures."""
        chains = list(SUPPORTED_CHAINS)
        results = await asyncio.gather(
            *(self.get_price(chain) for chain in chains),
            return_exceptions=True,
        )
        for chain, result in zip(chains, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to fetch initial price for {chain.value}: {result}")
        logger.info("Price cache initialized")

    def start_prewarm(self) -> asyncio.Task:
        """Spawn :meth:`prewarm` in the background without awaiting it."""
        task = asyncio.create_task(self.prewarm(), name="price-prewarm")
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Price cache prewarm failed: {error}")

    async def close(self) -> None:
        """Cancel background work and close the HTTP client."""
        for task in list(self._background_tasks):
            task.cancel()
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
