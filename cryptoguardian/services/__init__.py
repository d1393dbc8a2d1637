"""Services package."""

from cryptoguardian.services.address_checker import AddressCheckService
from cryptoguardian.services.address_classifier import AddressClassifier
from cryptoguardian.services.aggregator import AddressDataAggregator
from cryptoguardian.services.price_oracle import PriceOracle
from cryptoguardian.services.rate_limit_service import (
    ClientRateLimiter,
    ProviderRateLimiter,
)
from cryptoguardian.services.risk_scorer import RiskScorerService

__all__ = [
    "AddressCheckService",
    "AddressClassifier",
    "AddressDataAggregator",
    "ClientRateLimiter",
    "PriceOracle",
    "ProviderRateLimiter",
    "RiskScorerService",
]
