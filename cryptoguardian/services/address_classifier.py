"""Address format detection and normalization."""

import logging
import re

from cryptoguardian.constants import EVM_CHAINS, ChainId
from cryptoguardian.models.address import AddressValidationResult

logger = logging.getLogger(__name__)

EVM_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

BITCOIN_PATTERNS = (
    re.compile(r"^[13][a-km-zA-HJ-NP-Z1-9]{25,34}$"),  # legacy P2PKH / P2SH
    re.compile(r"^[bc1][a-hj-mnp-zAC-HJ-NP-Z0-9]{39,59}$"),  # segwit
    re.compile(r"^bc1p[ac-hj-np-z02-9]{58}$"),  # taproot
)


class AddressClassifier:
    """
    Detects which supported chain an address belongs to.

    Matching is first-match-wins: the EVM hex grammar, then the Bitcoin
    grammars. Ethereum, BSC, Polygon and Arbitrum share one grammar, so an
    EVM-shaped address resolves to ethereum unless the caller supplies a
    chain hint naming another EVM chain.
    """

    def classify(
        self,
        raw: str,
        chain_hint: ChainId | None = None,
    ) -> AddressValidationResult:
        """
        Classify and normalize a raw address string.

        Args:
            raw: User-supplied address.
            chain_hint: Optional chain for EVM-shaped addresses.

        Returns:
            AddressValidationResult; never raises.
        """
        if not isinstance(raw, str):
            return AddressValidationResult(is_valid=False)

        address = raw.strip()

        if EVM_PATTERN.match(address):
            chain = chain_hint if chain_hint in EVM_CHAINS else ChainId.ETHEREUM
            return AddressValidationResult(
                is_valid=True,
                chain=chain,
                normalized_address=address.lower(),
            )

        if any(pattern.match(address) for pattern in BITCOIN_PATTERNS):
            return AddressValidationResult(
                is_valid=True,
                chain=ChainId.BITCOIN,
                normalized_address=address,
            )

        logger.debug(f"Address {address[:16]!r} matched no supported grammar")
        return AddressValidationResult(is_valid=False)
