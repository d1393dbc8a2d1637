"""Abstract chain data provider interface."""

from abc import ABC, abstractmethod

from cryptoguardian.constants import ChainId
from cryptoguardian.models.address import AddressSnapshot


class DataProvider(ABC):
    """Abstract base class for chain data providers.

    Implementations never raise from :meth:`fetch`; every upstream failure
    is reported as ``None`` so the aggregator can move on to the next source.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier, also the rate-limit bucket."""
        ...

    @property
    @abstractmethod
    def supported_chains(self) -> frozenset[ChainId]:
        """Chains this provider can serve."""
        ...

    @abstractmethod
    async def fetch(self, address: str, chain: ChainId) -> AddressSnapshot | None:
        """
        Fetch balance and activity for a normalized address.

        Args:
            address: Normalized address.
            chain: Chain the address belongs to.

        Returns:
            AddressSnapshot, or None if the provider could not answer.
        """
        ...

    async def close(self) -> None:
        """Release provider resources."""
        return None

    def supports_chain(self, chain: ChainId) -> bool:
        """Check if the provider supports a given chain."""
        return chain in self.supported_chains
