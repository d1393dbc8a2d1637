"""Risk assessment and API request/response models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from cryptoguardian.constants import ChainId, Verdict


class RiskAssessment(BaseModel):
    """Scored verdict for an address.

    Serialized with the field names the web client expects
    (``total_value``, ``blockchain``).
    """

    address: str = ""
    verdict: Verdict
    risk_score: int = Field(ge=0, le=100)
    findings: list[str] = Field(default_factory=list)
    transaction_count: int = Field(default=0, ge=0)
    total_value_usd: str = Field(default="0", serialization_alias="total_value")
    recommendation: str
    chain: ChainId = Field(default=ChainId.ETHEREUM, serialization_alias="blockchain")
    balance: str = "0"


class AddressCheckRequest(BaseModel):
    """Request body for an address check.

    ``address`` is typed loosely so the route can answer with a stable
    error code instead of a generic validation error.
    """

    address: Any = None
    chain: ChainId | None = Field(
        default=None,
        description="Optional chain hint for EVM-shaped addresses",
    )


class AddressCheckResponse(BaseModel):
    """Envelope returned by the address check endpoint."""

    success: bool
    data: RiskAssessment | None = None
    error: str | None = None
    code: str | None = None


class ChainInfo(BaseModel):
    """Public description of a supported chain."""

    slug: str
    name: str
    symbol: str
    pattern: str


class HealthResponse(BaseModel):
    """Health check response model."""

    status: Literal["OK", "DEGRADED"]
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    uptime: float
    version: str
    cache_status: Literal["connected", "disconnected"]
