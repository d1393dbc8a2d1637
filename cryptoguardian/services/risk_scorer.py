"""Rule-based risk scoring for blockchain addresses."""

import logging
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import NamedTuple, Sequence

from cryptoguardian.constants import NO_FINDINGS, VERDICT_TIERS, Verdict
from cryptoguardian.models.address import AddressInfo, Transaction
from cryptoguardian.models.risk import RiskAssessment

logger = logging.getLogger(__name__)


class Signal(NamedTuple):
    """Score and finding produced by one signal."""

    score: int
    finding: str = ""


def _to_decimal(value: str | None) -> Decimal | None:
    """Parse a numeric string, returning None when it is not a finite number."""
    if value is None:
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _to_epoch_seconds(timestamp: str) -> float | None:
    """Parse a unix timestamp or ISO-8601 string into epoch seconds.

    Numeric strings are read as seconds, never milliseconds. NaN and
    infinite values give None, as does anything unparseable.
    """
    text = str(timestamp).strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return seconds if math.isfinite(seconds) else None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None


class RiskScorerService:
    """
    Service for scoring the risk of a single address.

    Implements an additive model built from independent signals:
    - Baseline activity (empty or barely used addresses)
    - Transaction patterns (dust, bursts, round numbers, outliers)
    - Address activity volume and "frequently emptied" behaviour
    - Value patterns (whale-sized receipts)

    The summed score is clamped to 0-100 and mapped onto a verdict tier.
    The scorer is pure: no I/O and no state between calls.
    """

    def __init__(self, max_score: int = 100) -> None:
        self._max_score = max_score

    def analyze(
        self,
        address_info: AddressInfo,
        transactions: Sequence[Transaction] = (),
    ) -> RiskAssessment:
        """
        Score an address.

        Args:
            address_info: Transaction count, raw balance and received USD.
            transactions: Chronological transactions, possibly empty.

        Returns:
            RiskAssessment with a blank address, filled in by the caller.
        """
        findings: list[str] = []
        total_score = 0

        baseline = self.baseline_signal(address_info)
        if baseline.score > 0:
            total_score += baseline.score
            findings.append(baseline.finding)

        pattern_score = self.transaction_pattern_score(transactions)
        if pattern_score > 0:
            total_score += pattern_score
            if pattern_score > 50:
                findings.append("Highly suspicious transaction patterns detected")
            elif pattern_score > 30:
                findings.append("Unusual transaction activity")
            else:
                findings.append("Some unusual transaction patterns")

        for signal in (self.activity_signal(address_info), self.value_signal(address_info)):
            if signal.score > 0:
                total_score += signal.score
                findings.append(signal.finding)

        risk_score = max(0, min(self._max_score, total_score))
        verdict, recommendation = self.get_verdict(risk_score)

        if not findings:
            findings.append(NO_FINDINGS)

        logger.debug(f"Risk analysis: score={risk_score} verdict={verdict.value}")

        return RiskAssessment(
            address="",
            verdict=verdict,
            risk_score=risk_score,
            findings=findings,
            transaction_count=address_info.transaction_count,
            total_value_usd=address_info.received_usd or "0",
            recommendation=recommendation,
            balance=address_info.balance,
        )

    def get_verdict(self, score: int) -> tuple[Verdict, str]:
        """Map a clamped score onto its verdict and recommendation."""
        for threshold, verdict, recommendation in VERDICT_TIERS:
            if score >= threshold:
                return verdict, recommendation
        _, verdict, recommendation = VERDICT_TIERS[-1]
        return verdict, recommendation

    def baseline_signal(self, address_info: AddressInfo) -> Signal:
        """Base suspicion for empty or barely used addresses."""
        tx_count = address_info.transaction_count
        balance = _to_decimal(address_info.balance)
        if balance is None:
            return Signal(0)

        if tx_count == 0 and balance == 0:
            return Signal(25, "Empty address with no transaction history")
        if tx_count < 5 and balance == 0:
            return Signal(15, "New or minimally used address")
        if tx_count < 5 and balance > 0:
            return Signal(10, "New address holding funds")
        return Signal(0)

    def transaction_pattern_score(self, transactions: Sequence[Transaction]) -> int:
        """Score suspicious transaction patterns, capped at 100."""
        tx_count = len(transactions)
        if tx_count == 0:
            return 0

        values = [_to_decimal(tx.value) for tx in transactions]
        score = 0

        # Zero-value transfers (dust / address poisoning)
        zero_value = sum(1 for v in values if v is not None and v == 0)
        if zero_value > 20:
            score += 30
        elif zero_value > 10:
            score += 20
        elif zero_value > 5:
            score += 10

        # Bursts of activity (bot-like behaviour)
        if tx_count > 100:
            times = [
                t for t in (_to_epoch_seconds(tx.timestamp) for tx in transactions[:50])
                if t is not None
            ]
            if len(times) > 1:
                span_hours = (max(times) - min(times)) / 3600
                if span_hours < 1:
                    score += 40
                elif span_hours < 24:
                    score += 25

        # Round amounts (automation)
        round_numbers = sum(
            1 for v in values
            if v is not None and 0 < v < 1000 and v == v.to_integral_value()
        )
        round_share = round_numbers / tx_count * 100
        if round_share > 80:
            score += 20
        elif round_share > 60:
            score += 15

        # Transfers far above the average
        positive = [v for v in values if v is not None and v > 0]
        if len(positive) > 10:
            mean = sum(positive) / len(positive)
            if any(v > mean * 10 for v in positive):
                score += 15

        return min(score, 100)

    def activity_signal(self, address_info: AddressInfo) -> Signal:
        """Activity volume; a drained busy address overrides the volume finding."""
        tx_count = address_info.transaction_count
        signal = Signal(0)

        if tx_count > 1000:
            signal = Signal(25, "Unusually high activity for address")
        elif tx_count > 500:
            signal = Signal(15, "High transaction volume detected")

        balance = _to_decimal(address_info.balance)
        if balance is not None and balance == 0 and tx_count > 50:
            signal = Signal(20, "Address frequently emptied (potential mixer)")

        return signal

    def value_signal(self, address_info: AddressInfo) -> Signal:
        """Whale-sized total received value."""
        received = _to_decimal(address_info.received_usd)
        if received is not None and received > 1_000_000:
            return Signal(10, "High value address (whale activity)")
        return Signal(0)
