"""Chain data providers package."""

from cryptoguardian.providers.blockchain_com import BlockchainComProvider
from cryptoguardian.providers.blockcypher import BlockCypherProvider
from cryptoguardian.providers.etherscan import EtherscanProvider
from cryptoguardian.providers.local import LocalFallbackProvider
from cryptoguardian.providers.multi_provider import ProviderRegistry

__all__ = [
    "BlockCypherProvider",
    "BlockchainComProvider",
    "EtherscanProvider",
    "LocalFallbackProvider",
    "ProviderRegistry",
]
