"""Application container and FastAPI dependencies."""

import logging
import time
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Request

from cryptoguardian.cache.memory import MemoryCacheBackend
from cryptoguardian.cache.redis import RedisCacheBackend
from cryptoguardian.config import Settings
from cryptoguardian.core.cache import CacheBackend
from cryptoguardian.providers.blockchain_com import BlockchainComProvider
from cryptoguardian.providers.blockcypher import BlockCypherProvider
from cryptoguardian.providers.etherscan import EtherscanProvider
from cryptoguardian.providers.multi_provider import ProviderRegistry
from cryptoguardian.services.address_checker import AddressCheckService
from cryptoguardian.services.address_classifier import AddressClassifier
from cryptoguardian.services.aggregator import AddressDataAggregator
from cryptoguardian.services.price_oracle import PriceOracle
from cryptoguardian.services.rate_limit_service import (
    ClientRateLimiter,
    ProviderRateLimiter,
)
from cryptoguardian.services.risk_scorer import RiskScorerService

logger = logging.getLogger(__name__)


def build_cache_backend(settings: Settings) -> CacheBackend:
    """Create the cache backend selected in settings."""
    if settings.cache_backend == "redis":
        return RedisCacheBackend(
            redis_url=settings.redis_url,
            default_ttl=settings.address_cache_ttl_seconds,
        )
    return MemoryCacheBackend(default_ttl=settings.address_cache_ttl_seconds)


@dataclass
class ApplicationContainer:
    """Long-lived owner of every stateful collaborator.

    One container exists per application; tests build their own so no
    cache or rate-limit state leaks between them.
    """

    settings: Settings
    cache: CacheBackend
    provider_rate_limiter: ProviderRateLimiter
    client_rate_limiter: ClientRateLimiter
    registry: ProviderRegistry
    price_oracle: PriceOracle
    classifier: AddressClassifier
    risk_scorer: RiskScorerService
    aggregator: AddressDataAggregator
    address_checker: AddressCheckService
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationContainer":
        """Wire the production object graph from settings."""
        cache = build_cache_backend(settings)
        provider_rate_limiter = ProviderRateLimiter(
            min_interval=settings.provider_min_interval_seconds
        )
        timeout = settings.request_timeout_seconds

        registry = ProviderRegistry(
            [
                EtherscanProvider(
                    provider_rate_limiter,
                    api_keys=settings.get_etherscan_keys(),
                    timeout=timeout,
                ),
                BlockchainComProvider(
                    provider_rate_limiter,
                    base_url=settings.blockchain_com_base_url,
                    timeout=timeout,
                ),
                BlockCypherProvider(
                    provider_rate_limiter,
                    base_url=settings.blockcypher_base_url,
                    timeout=timeout,
                ),
            ]
        )
        price_oracle = PriceOracle(
            cache,
            coingecko_base_url=settings.coingecko_base_url,
            cryptocompare_base_url=settings.cryptocompare_base_url,
            timeout=settings.price_timeout_seconds,
            price_ttl=settings.price_cache_ttl_seconds,
            failure_ttl=settings.price_failure_ttl_seconds,
        )
        return cls.assemble(settings, cache, provider_rate_limiter, registry, price_oracle)

    @classmethod
    def assemble(
        cls,
        settings: Settings,
        cache: CacheBackend,
        provider_rate_limiter: ProviderRateLimiter,
        registry: ProviderRegistry,
        price_oracle: PriceOracle,
    ) -> "ApplicationContainer":
        """Build the remaining services around the given I/O collaborators."""
        classifier = AddressClassifier()
        risk_scorer = RiskScorerService()
        aggregator = AddressDataAggregator(
            registry,
            price_oracle,
            cache,
            strategy=settings.aggregation_strategy,
            race_timeout=settings.race_timeout_seconds,
            cache_ttl=settings.address_cache_ttl_seconds,
        )
        return cls(
            settings=settings,
            cache=cache,
            provider_rate_limiter=provider_rate_limiter,
            client_rate_limiter=ClientRateLimiter(
                max_requests=settings.rate_limit_max_requests,
                window_seconds=settings.rate_limit_window_seconds,
            ),
            registry=registry,
            price_oracle=price_oracle,
            classifier=classifier,
            risk_scorer=risk_scorer,
            aggregator=aggregator,
            address_checker=AddressCheckService(classifier, aggregator, risk_scorer),
        )

    def uptime(self) -> float:
        """Seconds since the container was created."""
        return time.monotonic() - self.started_at

    async def close(self) -> None:
        """Release network clients and cache connections."""
        await self.registry.close()
        await self.price_oracle.close()
        await self.cache.close()
        logger.info("Application container closed")


def get_container(request: Request) -> ApplicationContainer:
    """Get the application container attached to the running app."""
    return request.app.state.container


def get_address_checker(
    container: Annotated[ApplicationContainer, Depends(get_container)],
) -> AddressCheckService:
    """Get the address check service."""
    return container.address_checker


def get_address_classifier(
    container: Annotated[ApplicationContainer, Depends(get_container)],
) -> AddressClassifier:
    """Get the address classifier."""
    return container.classifier
