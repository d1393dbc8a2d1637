"""Domain models package."""

from cryptoguardian.models.address import (
    AddressInfo,
    AddressSnapshot,
    AddressValidationResult,
    Transaction,
)
from cryptoguardian.models.risk import (
    AddressCheckRequest,
    AddressCheckResponse,
    ChainInfo,
    HealthResponse,
    RiskAssessment,
)

__all__ = [
    "AddressCheckRequest",
    "AddressCheckResponse",
    "AddressInfo",
    "AddressSnapshot",
    "AddressValidationResult",
    "ChainInfo",
    "HealthResponse",
    "RiskAssessment",
    "Transaction",
]
