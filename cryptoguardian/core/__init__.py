"""Core module for base interfaces and abstractions."""

from cryptoguardian.core.cache import CacheBackend
from cryptoguardian.core.exceptions import (
    AggregationError,
    APIRateLimitError,
    APITimeoutError,
    CacheError,
    GuardianError,
    InvalidAddressError,
    ProviderError,
    UnsupportedChainError,
)
from cryptoguardian.core.provider import DataProvider

__all__ = [
    "APIRateLimitError",
    "APITimeoutError",
    "AggregationError",
    "CacheBackend",
    "CacheError",
    "DataProvider",
    "GuardianError",
    "InvalidAddressError",
    "ProviderError",
    "UnsupportedChainError",
]
