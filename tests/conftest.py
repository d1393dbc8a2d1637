"""Test configuration and fixtures."""

import asyncio
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio

from cryptoguardian.cache.memory import MemoryCacheBackend
from cryptoguardian.config import Settings
from cryptoguardian.constants import SUPPORTED_CHAINS, ChainId
from cryptoguardian.core.cache import CacheBackend
from cryptoguardian.core.provider import DataProvider
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.services.address_classifier import AddressClassifier
from cryptoguardian.services.price_oracle import PriceOracle
from cryptoguardian.services.rate_limit_service import ProviderRateLimiter
from cryptoguardian.services.risk_scorer import RiskScorerService


class StubProvider(DataProvider):
    """Provider double with a scripted answer."""

    def __init__(
        self,
        name: str,
        chains: frozenset[ChainId] | None = None,
        result: AddressSnapshot | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self._name = name
        self._chains = chains if chains is not None else frozenset(SUPPORTED_CHAINS)
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, ChainId]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def supported_chains(self) -> frozenset[ChainId]:
        return self._chains

    async def fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        self.calls.append((address, chain))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def close(self) -> None:
        self.closed = True


def price_handler(prices: dict[str, float]) -> Callable[[httpx.Request], httpx.Response]:
    """MockTransport handler answering CoinGecko requests from ``prices``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/simple/price"):
            coin_id = request.url.params["ids"]
            if coin_id in prices:
                return httpx.Response(200, json={coin_id: {"usd": prices[coin_id]}})
            return httpx.Response(200, json={})
        return httpx.Response(503)

    return handler


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        provider_min_interval_seconds=0.0,
        rate_limit_max_requests=1000,
    )


@pytest_asyncio.fixture
async def cache_backend() -> AsyncGenerator[CacheBackend, None]:
    """Provide a memory cache backend for tests."""
    cache = MemoryCacheBackend(default_ttl=300)
    yield cache
    await cache.close()


@pytest.fixture
def rate_limiter() -> ProviderRateLimiter:
    """Provider rate limiter without spacing."""
    return ProviderRateLimiter(min_interval=0.0)


@pytest.fixture
def risk_scorer() -> RiskScorerService:
    """Provide a risk scorer service for tests."""
    return RiskScorerService()


@pytest.fixture
def classifier() -> AddressClassifier:
    """Provide an address classifier."""
    return AddressClassifier()


@pytest_asyncio.fixture
async def price_oracle(cache_backend: CacheBackend) -> AsyncGenerator[PriceOracle, None]:
    """Price oracle answering ETH at $2,000 and BTC at $50,000."""
    oracle = PriceOracle(
        cache_backend,
        transport=httpx.MockTransport(price_handler({"ethereum": 2000.0, "bitcoin": 50000.0})),
    )
    yield oracle
    await oracle.close()


@pytest.fixture
def provider_factory() -> Callable[..., StubProvider]:
    """Factory for scripted provider doubles."""
    return StubProvider
