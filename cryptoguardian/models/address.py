"""Address-level domain models."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cryptoguardian.constants import ChainId


class AddressValidationResult(BaseModel):
    """Outcome of classifying a raw address string."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    chain: ChainId = ChainId.ETHEREUM
    normalized_address: str | None = None

    @model_validator(mode="after")
    def check_normalized_address(self) -> "AddressValidationResult":
        """An invalid result never carries a normalized address."""
        if not self.is_valid and self.normalized_address is not None:
            raise ValueError("invalid classification cannot carry a normalized address")
        return self


class AddressSnapshot(BaseModel):
    """Balance and activity of one address at one point in time.

    Providers may leave ``balance`` or ``transaction_count`` unset when the
    upstream does not report them; the aggregator fills defaults on the
    merged result via :meth:`with_defaults`.
    """

    address: str
    balance: str | None = Field(default=None, description="Raw integer units (wei or satoshi)")
    transaction_count: int | None = Field(default=None, ge=0)
    total_value_usd: str = "0"
    total_received: str | None = Field(default=None, description="Raw integer units")
    total_received_usd: str | None = None
    source: str = "local"

    def has_data(self) -> bool:
        """Check whether the snapshot carries a balance or a transaction count."""
        return self.balance is not None or self.transaction_count is not None

    def with_defaults(self) -> "AddressSnapshot":
        """Return a copy with missing balance/count replaced by zero."""
        return self.model_copy(
            update={
                "balance": self.balance if self.balance is not None else "0",
                "transaction_count": self.transaction_count or 0,
            }
        )


class Transaction(BaseModel):
    """A single transfer touching the analysed address."""

    value: str
    timestamp: str
    sender: str | None = None
    recipient: str | None = None


class AddressInfo(BaseModel):
    """Address metadata consumed by the risk scorer."""

    transaction_count: int = Field(default=0, ge=0)
    balance: str = "0"
    received_usd: str | None = None
