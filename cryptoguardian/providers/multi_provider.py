"""Provider registry with chain-family priority routing."""

import asyncio
import logging
from typing import Iterable

from cryptoguardian.constants import (
    LOCAL_PROVIDER_NAME,
    PROVIDER_PRIORITY,
    SUPPORTED_CHAINS,
    ChainId,
)
from cryptoguardian.core.provider import DataProvider
from cryptoguardian.providers.local import LocalFallbackProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Holds the configured chain data providers and orders them per chain.

    Provider priority:
    - EVM chains: etherscan > blockcypher > local
    - Bitcoin: blockchain_com > blockcypher > local

    Providers that are not registered or do not support the chain are
    skipped. The local fallback is always present and always last.
    """

    def __init__(
        self,
        providers: Iterable[DataProvider],
        priority: dict | None = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            providers: Provider instances; names must be unique.
            priority: Override of the chain-family priority table.
        """
        self._providers: dict[str, DataProvider] = {}
        for provider in providers:
            if provider.name in self._providers:
                raise ValueError(f"Duplicate provider name: {provider.name}")
            self._providers[provider.name] = provider
        self._providers.setdefault(LOCAL_PROVIDER_NAME, LocalFallbackProvider())
        self._priority = priority or PROVIDER_PRIORITY

        logger.info(f"[ProviderRegistry] Initialized with providers: {sorted(self._providers)}")

    @property
    def fallback(self) -> DataProvider:
        """The terminal always-succeeding provider."""
        return self._providers[LOCAL_PROVIDER_NAME]

    def get(self, name: str) -> DataProvider | None:
        """Look up a provider by name."""
        return self._providers.get(name)

    def providers_for(self, chain: ChainId) -> list[DataProvider]:
        """Providers for ``chain`` in priority order, ending with the fallback."""
        family = SUPPORTED_CHAINS[chain].family
        ordered: list[DataProvider] = []
        for name in self._priority.get(family, ()):
            provider = self._providers.get(name)
            if provider is None or name == LOCAL_PROVIDER_NAME:
                continue
            if provider.supports_chain(chain):
                ordered.append(provider)
        ordered.append(self.fallback)
        logger.debug(f"[ProviderRegistry] {chain.value}: {[p.name for p in ordered]}")
        return ordered

    async def close(self) -> None:
        """Close all provider connections."""
        logger.info("[ProviderRegistry] Closing all provider connections...")
        await asyncio.gather(
            *(provider.close() for provider in self._providers.values()),
            return_exceptions=True,
        )
