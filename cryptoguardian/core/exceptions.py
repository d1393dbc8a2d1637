"""Custom exceptions for Crypto Guardian."""


class GuardianError(Exception):
    """Base exception for all Crypto Guardian errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or "GUARDIAN_ERROR"
        super().__init__(self.message)


class InvalidAddressError(GuardianError):
    """Raised when an address does not match any supported chain grammar."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__("Invalid address format", "INVALID_ADDRESS_FORMAT")


class UnsupportedChainError(GuardianError):
    """Raised when a provider is asked about a chain it cannot serve."""

    def __init__(self, chain: str, provider: str | None = None) -> None:
        self.chain = chain
        self.provider = provider
        message = f"Unsupported blockchain: {chain}"
        if provider:
            message += f" (provider {provider})"
        super().__init__(message, "UNSUPPORTED_CHAIN")


class ProviderError(GuardianError):
    """Raised when an upstream provider returns an unusable response."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}", "PROVIDER_ERROR")


class APIRateLimitError(ProviderError):
    """Raised when an upstream rate limit is exceeded."""

    def __init__(self, provider: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        message = "rate limit exceeded"
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(provider, message)
        self.code = "RATE_LIMIT_EXCEEDED"


class APITimeoutError(ProviderError):
    """Raised when an upstream request times out."""

    def __init__(self, provider: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(provider, f"timeout after {timeout}s")
        self.code = "API_TIMEOUT"


class AggregationError(GuardianError):
    """Raised when address data could not be aggregated from any source."""

    def __init__(self, chain: str) -> None:
        self.chain = chain
        super().__init__("Failed to fetch address data", "AGGREGATION_ERROR")


class CacheError(GuardianError):
    """Raised when cache operations fail."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message, "CACHE_ERROR")
