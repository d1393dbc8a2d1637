"""Tests for the top-level address check service."""

from unittest.mock import AsyncMock

import pytest

from cryptoguardian.constants import (
    FALLBACK_RECOMMENDATION,
    LIMITED_DATA_FINDING,
    ChainId,
    Verdict,
)
from cryptoguardian.core.cache import CacheBackend
from cryptoguardian.core.exceptions import AggregationError, ProviderError
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.providers.multi_provider import ProviderRegistry
from cryptoguardian.services.address_checker import AddressCheckService
from cryptoguardian.services.address_classifier import AddressClassifier
from cryptoguardian.services.aggregator import AddressDataAggregator
from cryptoguardian.services.price_oracle import PriceOracle
from cryptoguardian.services.risk_scorer import RiskScorerService

ETH_ADDRESS = "0x742d35Cc6634C0532925a3b8D4C9db96C4b4d8bc"
BTC_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"


@pytest.fixture
def make_checker(
    classifier: AddressClassifier,
    risk_scorer: RiskScorerService,
    price_oracle: PriceOracle,
    cache_backend: CacheBackend,
):
    """Build a checker over the given providers."""

    def factory(providers: list) -> AddressCheckService:
        aggregator = AddressDataAggregator(ProviderRegistry(providers), price_oracle, cache_backend)
        return AddressCheckService(classifier, aggregator, risk_scorer)

    return factory


class TestCheckAddress:
    """Tests for AddressCheckService.check_address."""

    @pytest.mark.asyncio
    async def test_empty_ethereum_address(self, make_checker, provider_factory) -> None:
        """An address with no history is flagged by the baseline signal."""
        explorer = provider_factory(
            "etherscan",
            result=AddressSnapshot(
                address=ETH_ADDRESS.lower(), balance="0", transaction_count=0, source="etherscan"
            ),
        )
        checker = make_checker([explorer])

        result = await checker.check_address(ETH_ADDRESS)

        assert result.address == ETH_ADDRESS.lower()
        assert result.chain == ChainId.ETHEREUM
        assert result.risk_score >= 0
        assert result.verdict == Verdict.SUSPICIOUS
        assert "Empty address with no transaction history" in result.findings
        assert explorer.calls == [(ETH_ADDRESS.lower(), ChainId.ETHEREUM)]

    @pytest.mark.asyncio
    async def test_funded_bitcoin_address(self, make_checker, provider_factory) -> None:
        """Bitcoin balances are priced and an established address scores clean."""
        explorer = provider_factory(
            "blockchain_com",
            result=AddressSnapshot(
                address=BTC_ADDRESS,
                balance="200000000",
                transaction_count=40,
                total_received="300000000",
                source="blockchain_com",
            ),
        )
        checker = make_checker([explorer])

        result = await checker.check_address(BTC_ADDRESS)

        assert result.chain == ChainId.BITCOIN
        assert result.address == BTC_ADDRESS
        assert result.verdict == Verdict.CLEAN
        assert result.total_value_usd == "100000.00"
        assert result.balance == "200000000"
        assert result.transaction_count == 40

    @pytest.mark.asyncio
    async def test_chain_hint(self, make_checker, provider_factory) -> None:
        """A chain hint routes an EVM address to that chain."""
        explorer = provider_factory(
            "etherscan",
            result=AddressSnapshot(
                address=ETH_ADDRESS.lower(), balance="5", transaction_count=9, source="etherscan"
            ),
        )
        checker = make_checker([explorer])

        result = await checker.check_address(ETH_ADDRESS, ChainId.POLYGON)

        assert result.chain == ChainId.POLYGON
        assert explorer.calls == [(ETH_ADDRESS.lower(), ChainId.POLYGON)]

    @pytest.mark.asyncio
    async def test_all_providers_fail(self, make_checker, provider_factory) -> None:
        """Network failures everywhere still produce an assessment."""
        failing = [
            provider_factory("etherscan", error=ProviderError("etherscan", "down")),
            provider_factory("blockcypher", error=ProviderError("blockcypher", "down")),
        ]
        checker = make_checker(failing)

        result = await checker.check_address(ETH_ADDRESS)

        assert result.risk_score >= 15
        assert result.findings
        assert result.chain == ChainId.ETHEREUM

    @pytest.mark.asyncio
    async def test_idempotent_within_ttl(self, make_checker, provider_factory) -> None:
        """Two checks of the same address give the same answer and one upstream call."""
        explorer = provider_factory(
            "etherscan",
            result=AddressSnapshot(
                address=ETH_ADDRESS.lower(), balance="7", transaction_count=12, source="etherscan"
            ),
        )
        checker = make_checker([explorer])

        first = await checker.check_address(ETH_ADDRESS)
        second = await checker.check_address(ETH_ADDRESS)

        assert first == second
        assert len(explorer.calls) == 1


class TestFallbackAnalysis:
    """Tests for the degraded path."""

    @pytest.mark.asyncio
    async def test_aggregation_failure(
        self,
        classifier: AddressClassifier,
        risk_scorer: RiskScorerService,
    ) -> None:
        """An aggregation error yields the limited-data assessment."""
        aggregator = AsyncMock(spec=AddressDataAggregator)
        aggregator.get_address_data.side_effect = AggregationError("ethereum")
        checker = AddressCheckService(classifier, aggregator, risk_scorer)

        result = await checker.check_address(ETH_ADDRESS)

        assert result.risk_score >= 15
        assert result.findings[0] == LIMITED_DATA_FINDING
        assert len(result.findings) <= 4
        assert result.recommendation == FALLBACK_RECOMMENDATION
        assert result.address == ETH_ADDRESS.lower()
        assert result.balance == "0"
        assert result.total_value_usd == "0"

    @pytest.mark.asyncio
    async def test_invalid_address_never_raises(
        self,
        classifier: AddressClassifier,
        risk_scorer: RiskScorerService,
    ) -> None:
        """Classification failure is handled like any other failure."""
        aggregator = AsyncMock(spec=AddressDataAggregator)
        checker = AddressCheckService(classifier, aggregator, risk_scorer)

        result = await checker.check_address("  not-an-address  ")

        assert result.address == "not-an-address"
        assert result.chain == ChainId.ETHEREUM
        assert result.risk_score >= 15
        aggregator.get_address_data.assert_not_called()
