"""Address data aggregation across chain data providers."""

import asyncio
import logging
from typing import Literal

from cryptoguardian.constants import LOCAL_PROVIDER_NAME, ChainId
from cryptoguardian.core.cache import CacheBackend
from cryptoguardian.core.exceptions import AggregationError
from cryptoguardian.core.provider import DataProvider
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.providers.multi_provider import ProviderRegistry
from cryptoguardian.services.price_oracle import PriceOracle

logger = logging.getLogger(__name__)

Strategy = Literal["sequential", "race"]


class AddressDataAggregator:
    """
    Produces one AddressSnapshot per (chain, address).

    Two orchestration strategies:
    - sequential: providers tried strictly in priority order, first result
      with a balance or transaction count wins
    - race: all remote providers queried concurrently, first useful result
      wins within an overall timeout; losers are cancelled

    Either way the local fallback answers when nothing else does. Results
    are cached for a short TTL and USD values come from the price oracle.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        price_oracle: PriceOracle,
        cache: CacheBackend,
        strategy: Strategy = "sequential",
        race_timeout: float = 5.0,
        cache_ttl: int = 300,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            registry: Provider registry with priority routing.
            price_oracle: Oracle used for USD conversion.
            cache: Cache backend for address snapshots.
            strategy: "sequential" or "race".
            race_timeout: Overall deadline for the race strategy in seconds.
            cache_ttl: Snapshot cache TTL in seconds.
        """
        if strategy not in ("sequential", "race"):
            raise ValueError(f"Unknown aggregation strategy: {strategy}")
        self._registry = registry
        self._price_oracle = price_oracle
        self._cache = cache
        self._strategy = strategy
        self._race_timeout = race_timeout
        self._cache_ttl = cache_ttl

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    async def get_address_data(self, address: str, chain: ChainId) -> AddressSnapshot:
        """
        Fetch, price and cache the snapshot for a normalized address.

        Args:
            address: Normalized address.
            chain: Chain the address belongs to.

        Returns:
            AddressSnapshot with balance, count and USD value populated.

        Raises:
            AggregationError: If anything unexpected fails along the way.
        """
        try:
            cache_key = self._cache.address_key(chain.value, address)
            cached = await self._cache.get(cache_key)
            if cached:
                logger.info(f"Cache hit for address data: {chain.value} {address[:16]}...")
                return AddressSnapshot.model_validate(cached)

            providers = self._registry.providers_for(chain)
            if self._strategy == "race":
                snapshot = await self._fetch_race(address, chain, providers)
            else:
                snapshot = await self._fetch_sequential(address, chain, providers)

            snapshot = await self._attach_usd_values(snapshot.with_defaults(), chain)
            await self._cache.set(cache_key, snapshot.model_dump(), ttl=self._cache_ttl)
            return snapshot
        except Exception as e:
            logger.error(
                f"Error fetching address info for {address[:16]}... on {chain.value}: {e!r}"
            )
            raise AggregationError(chain.value) from e

    async def _fetch_sequential(
        self,
        address: str,
        chain: ChainId,
        providers: list[DataProvider],
    ) -> AddressSnapshot:
        """Try providers in order, stopping at the first useful answer."""
        for provider in providers:
            try:
                result = await provider.fetch(address, chain)
            except Exception as e:
                logger.warning(f"[Aggregator] {provider.name} failed, trying next: {e!r}")
                continue
            if result is not None and result.has_data():
                logger.info(f"[Aggregator] {chain.value} data from {provider.name}")
                return result
            logger.debug(f"[Aggregator] {provider.name} returned no data, trying next")

        return await self._registry.fallback.fetch(address, chain)

    async def _fetch_race(
        self,
        address: str,
        chain: ChainId,
        providers: list[DataProvider],
    ) -> AddressSnapshot:
        """Query remote providers concurrently and keep the first useful answer."""
        contenders = [p for p in providers if p.name != LOCAL_PROVIDER_NAME]
        tasks: dict[asyncio.Task, DataProvider] = {
            asyncio.create_task(p.fetch(address, chain), name=f"fetch-{p.name}"): p
            for p in contenders
        }
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._race_timeout
        pending = set(tasks)
        winner: AddressSnapshot | None = None

        try:
            while pending and winner is None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.warning(
                        f"[Aggregator] Race for {address[:16]}... timed out after "
                        f"{self._race_timeout}s"
                    )
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                # Several may finish together; prefer the higher-priority one
                for task in sorted(done, key=lambda t: contenders.index(tasks[t])):
                    if task.cancelled() or task.exception() is not None:
                        continue
                    result = task.result()
                    if result is not None and result.has_data():
                        winner = result
                        logger.info(f"[Aggregator] {chain.value} race won by {tasks[task].name}")
                        break
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if winner is None:
            return await self._registry.fallback.fetch(address, chain)
        return winner

    async def _attach_usd_values(
        self, snapshot: AddressSnapshot, chain: ChainId
    ) -> AddressSnapshot:
        """Convert balance (and total received, if known) to USD."""
        if snapshot.source == LOCAL_PROVIDER_NAME:
            return snapshot

        updates: dict[str, str | None] = {}
        try:
            updates["total_value_usd"] = await self._price_oracle.convert_to_usd(
                snapshot.balance or "0", chain
            )
        except Exception as e:
            logger.warning(f"[Aggregator] USD conversion failed for {chain.value}: {e!r}")
            updates["total_value_usd"] = "0"

        if snapshot.total_received is not None:
            try:
                updates["total_received_usd"] = await self._price_oracle.convert_to_usd(
                    snapshot.total_received, chain
                )
            except Exception as e:
                logger.warning(f"[Aggregator] Received-value conversion failed: {e!r}")

        return snapshot.model_copy(update=updates)
