"""Top-level address check: classify, aggregate, score."""

import logging
from typing import Any

from cryptoguardian.constants import (
    FALLBACK_MIN_SCORE,
    FALLBACK_RECOMMENDATION,
    LIMITED_DATA_FINDING,
    ChainId,
)
from cryptoguardian.core.exceptions import InvalidAddressError
from cryptoguardian.models.address import AddressInfo, Transaction
from cryptoguardian.models.risk import RiskAssessment
from cryptoguardian.services.address_classifier import AddressClassifier
from cryptoguardian.services.aggregator import AddressDataAggregator
from cryptoguardian.services.risk_scorer import RiskScorerService

logger = logging.getLogger(__name__)


class AddressCheckService:
    """
    Service answering "how risky is this address?".

    Any failure after the request arrives, including an address that fails
    classification, ends in a minimal local analysis instead of an error,
    so every call yields a well-formed assessment.
    """

    def __init__(
        self,
        classifier: AddressClassifier,
        aggregator: AddressDataAggregator,
        risk_scorer: RiskScorerService,
    ) -> None:
        self._classifier = classifier
        self._aggregator = aggregator
        self._risk_scorer = risk_scorer

    async def check_address(
        self,
        raw_address: Any,
        chain_hint: ChainId | None = None,
    ) -> RiskAssessment:
        """
        Check an address and return its risk assessment.

        Args:
            raw_address: Address as supplied by the user.
            chain_hint: Optional chain for EVM-shaped addresses.

        Returns:
            RiskAssessment with address and chain populated; never raises.
        """
        try:
            validation = self._classifier.classify(raw_address, chain_hint)
            if not validation.is_valid or validation.normalized_address is None:
                raise InvalidAddressError(str(raw_address))

            address = validation.normalized_address
            chain = validation.chain

            snapshot = await self._aggregator.get_address_data(address, chain)
            transactions = await self.get_recent_transactions(address, chain)

            analysis = self._risk_scorer.analyze(
                AddressInfo(
                    transaction_count=snapshot.transaction_count or 0,
                    balance=snapshot.balance or "0",
                    received_usd=snapshot.total_received_usd,
                ),
                transactions,
            )

            logger.info(
                f"Checked {chain.value} {address[:16]}...: "
                f"{analysis.verdict.value} ({analysis.risk_score}) via {snapshot.source}"
            )
            return analysis.model_copy(
                update={
                    "address": address,
                    "chain": chain,
                    "total_value_usd": snapshot.total_value_usd,
                }
            )
        except Exception as e:
            logger.error(f"Error checking address {str(raw_address)[:16]!r}: {e!r}")
            return self._fallback_analysis(raw_address, chain_hint)

    async def get_recent_transactions(
        self, address: str, chain: ChainId
    ) -> list[Transaction]:
        """Recent transactions for pattern analysis.

        None of the configured free explorers return transaction lists, so
        this is empty and only the address-level signals apply.
        """
        return []

    def _fallback_analysis(
        self,
        raw_address: Any,
        chain_hint: ChainId | None,
    ) -> RiskAssessment:
        """Minimal local analysis used when the full pipeline fails."""
        validation = self._classifier.classify(raw_address, chain_hint)
        address = validation.normalized_address or str(raw_address).strip()

        local = self._risk_scorer.analyze(AddressInfo(), [])

        return RiskAssessment(
            address=address,
            verdict=local.verdict,
            risk_score=max(local.risk_score, FALLBACK_MIN_SCORE),
            findings=[LIMITED_DATA_FINDING, *local.findings[:3]],
            transaction_count=0,
            total_value_usd="0",
            recommendation=FALLBACK_RECOMMENDATION,
            chain=validation.chain,
            balance="0",
        )
