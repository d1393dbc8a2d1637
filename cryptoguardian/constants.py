"""Application constants and chain configurations."""

from decimal import Decimal
from enum import Enum
from typing import NamedTuple


class ChainId(str, Enum):
    """Supported blockchain networks."""

    ETHEREUM = "ethereum"
    BITCOIN = "bitcoin"
    BINANCE_SMART_CHAIN = "binance-smart-chain"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"


class ChainFamily(str, Enum):
    """Address grammar and provider routing family."""

    EVM = "evm"
    UTXO = "utxo"


class ChainConfig(NamedTuple):
    """Configuration for a blockchain network."""

    slug: str
    name: str
    family: ChainFamily
    symbol: str
    decimals: int
    coingecko_id: str
    price_symbol: str
    explorer_api_url: str
    fallback_price_usd: Decimal
    pattern_hint: str


# Arbitrum balances are native ETH, so it is priced as ETH.
SUPPORTED_CHAINS: dict[ChainId, ChainConfig] = {
    ChainId.ETHEREUM: ChainConfig(
        "ethereum", "Ethereum", ChainFamily.EVM, "ETH", 18,
        "ethereum", "ETH", "https://api.etherscan.io", Decimal("3000"), "0x...",
    ),
    ChainId.BITCOIN: ChainConfig(
        "bitcoin", "Bitcoin", ChainFamily.UTXO, "BTC", 8,
        "bitcoin", "BTC", "", Decimal("60000"), "1..., 3..., bc1...",
    ),
    ChainId.BINANCE_SMART_CHAIN: ChainConfig(
        "binance-smart-chain", "Binance Smart Chain", ChainFamily.EVM, "BNB", 18,
        "binancecoin", "BNB", "https://api.bscscan.com", Decimal("550"), "0x...",
    ),
    ChainId.POLYGON: ChainConfig(
        "polygon", "Polygon", ChainFamily.EVM, "MATIC", 18,
        "matic-network", "MATIC", "https://api.polygonscan.com", Decimal("0.5"), "0x...",
    ),
    ChainId.ARBITRUM: ChainConfig(
        "arbitrum", "Arbitrum", ChainFamily.EVM, "ETH", 18,
        "ethereum", "ETH", "https://api.arbiscan.io", Decimal("3000"), "0x...",
    ),
}

EVM_CHAINS: frozenset[ChainId] = frozenset(
    chain for chain, config in SUPPORTED_CHAINS.items()
    if config.family == ChainFamily.EVM
)

# Provider names in priority order for each chain family
PROVIDER_PRIORITY: dict[ChainFamily, tuple[str, ...]] = {
    ChainFamily.EVM: ("etherscan", "blockcypher", "local"),
    ChainFamily.UTXO: ("blockchain_com", "blockcypher", "local"),
}

LOCAL_PROVIDER_NAME = "local"


class Verdict(str, Enum):
    """Categorical outcome of risk scoring."""

    CLEAN = "CLEAN"
    SUSPICIOUS = "SUSPICIOUS"
    MALICIOUS = "MALICIOUS"


# (minimum score, verdict, recommendation), checked top-down
VERDICT_TIERS: tuple[tuple[int, Verdict, str], ...] = (
    (70, Verdict.MALICIOUS, "AVOID - This address shows highly suspicious activity patterns"),
    (40, Verdict.SUSPICIOUS, "CAUTION - Exercise extreme care with this address"),
    (20, Verdict.SUSPICIOUS, "PROCEED WITH CARE - Monitor transactions carefully"),
    (0, Verdict.CLEAN, "SAFE - Address appears to be legitimate"),
)

NO_FINDINGS = "No suspicious activity detected"
LIMITED_DATA_FINDING = "Using multiple free APIs with limited data"
FALLBACK_RECOMMENDATION = "Basic validation completed - verify independently if concerned"
FALLBACK_MIN_SCORE = 15
