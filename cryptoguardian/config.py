"""Application configuration and settings."""

import os
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Crypto Guardian"
    app_version: str = "1.0.0"
    debug: bool = False
    port: int = Field(default=3001, description="Server port")

    # API
    api_prefix: str = "/api"

    # Etherscan-family explorers - comma-separated keys, tried in order
    etherscan_api_keys: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("etherscan_api_keys", "etherscan_api_key"),
    )

    # Upstream endpoints
    blockchain_com_base_url: str = "https://blockchain.info"
    blockcypher_base_url: str = "https://api.blockcypher.com/v1"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    cryptocompare_base_url: str = "https://min-api.cryptocompare.com"

    # Upstream behaviour
    request_timeout_seconds: float = 10.0
    price_timeout_seconds: float = 10.0
    provider_min_interval_seconds: float = 0.5
    aggregation_strategy: Literal["sequential", "race"] = "sequential"
    race_timeout_seconds: float = 5.0

    # Cache
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL, used when cache_backend is redis",
    )
    address_cache_ttl_seconds: int = 300
    price_cache_ttl_seconds: int = 300
    price_failure_ttl_seconds: int = 60

    # CORS Configuration
    allowed_origins: str = Field(
        default="",
        description="Comma-separated list of allowed origins for CORS",
    )

    # Per-IP request limiting
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 30
    rate_limit_sweep_interval_seconds: int = 300

    @field_validator("port")
    @classmethod
    def set_port(cls, v: int) -> int:
        """Use PORT from the hosting platform if available."""
        return int(os.getenv("PORT", v))

    def get_etherscan_keys(self) -> list[str]:
        """Split the configured explorer keys, keeping an empty key as last resort."""
        keys = [
            key.strip()
            for key in self.etherscan_api_keys.get_secret_value().split(",")
            if key.strip()
        ]
        return keys or [""]

    def get_allowed_origins(self) -> list[str]:
        """Parse allowed CORS origins."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
