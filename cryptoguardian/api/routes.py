"""API route definitions."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from cryptoguardian.api.dependencies import (
    ApplicationContainer,
    get_address_checker,
    get_address_classifier,
    get_container,
)
from cryptoguardian.constants import SUPPORTED_CHAINS
from cryptoguardian.models.risk import (
    AddressCheckRequest,
    AddressCheckResponse,
    ChainInfo,
    HealthResponse,
)
from cryptoguardian.services.address_checker import AddressCheckService
from cryptoguardian.services.address_classifier import AddressClassifier

logger = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 5

router = APIRouter(tags=["address"])
health_router = APIRouter(tags=["health"])


def error_response(status_code: int, error: str, code: str) -> JSONResponse:
    """Build the standard error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "code": code},
    )


@router.post(
    "/check-address",
    response_model=AddressCheckResponse,
    summary="Check Address Risk",
    description="Detect an address's chain and score its risk from public explorer data.",
)
async def check_address(
    checker: Annotated[AddressCheckService, Depends(get_address_checker)],
    classifier: Annotated[AddressClassifier, Depends(get_address_classifier)],
    payload: Annotated[AddressCheckRequest | None, Body()] = None,
):
    """
    Check an address.

    - **address**: Ethereum-style (0x...) or Bitcoin (1..., 3..., bc1...) address
    - **chain**: Optional chain for 0x addresses (binance-smart-chain, polygon, arbitrum)
    """
    address = payload.address if payload else None

    if address is None or address == "":
        return error_response(status.HTTP_400_BAD_REQUEST, "Address is required", "MISSING_ADDRESS")

    if not isinstance(address, str):
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Address must be a string", "INVALID_TYPE"
        )

    address = address.strip()
    if len(address) < MIN_ADDRESS_LENGTH:
        return error_response(status.HTTP_400_BAD_REQUEST, "Address too short", "ADDRESS_TOO_SHORT")

    validation = classifier.classify(address, payload.chain)
    if not validation.is_valid:
        logger.info(f"Rejected address with unsupported format: {address[:16]!r}")
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid address format. Supported: Ethereum (0x...), Bitcoin (1..., bc1...), "
            "BSC, Polygon, Arbitrum",
            "INVALID_ADDRESS_FORMAT",
        )

    result = await checker.check_address(address, payload.chain)
    return AddressCheckResponse(success=True, data=result)


@router.get(
    "/supported-chains",
    summary="List Supported Chains",
    description="Get the list of supported blockchain networks.",
)
async def list_supported_chains() -> JSONResponse:
    """List all supported blockchain networks."""
    chains = [
        ChainInfo(
            slug=config.slug,
            name=config.name,
            symbol=config.symbol,
            pattern=config.pattern_hint,
        ).model_dump()
        for config in SUPPORTED_CHAINS.values()
    ]
    return JSONResponse(content={"success": True, "data": {"chains": chains}})


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check service and cache health.",
)
async def health_check(
    container: Annotated[ApplicationContainer, Depends(get_container)],
) -> HealthResponse:
    """Check API health and cache connectivity."""
    cache_healthy = await container.cache.ping()

    return HealthResponse(
        status="OK" if cache_healthy else "DEGRADED",
        uptime=round(container.uptime(), 3),
        version=container.settings.app_version,
        cache_status="connected" if cache_healthy else "disconnected",
    )
