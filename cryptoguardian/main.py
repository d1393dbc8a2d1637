"""FastAPI application factory and main entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cryptoguardian.api.dependencies import ApplicationContainer
from cryptoguardian.api.routes import error_response, health_router, router
from cryptoguardian.config import Settings, get_settings
from cryptoguardian.middleware.security import (
    ClientRateLimitMiddleware,
    SecurityHeadersMiddleware,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Start background work on startup and release resources on shutdown."""
    container: ApplicationContainer = app.state.container
    settings = container.settings
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Cache backend: {settings.cache_backend}")
    logger.info(f"Aggregation strategy: {settings.aggregation_strategy}")

    # Fire-and-forget: requests never wait on the warmup
    container.price_oracle.start_prewarm()
    sweeper = asyncio.create_task(
        container.client_rate_limiter.run_sweeper(settings.rate_limit_sweep_interval_seconds),
        name="rate-limit-sweeper",
    )

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    await container.close()
    logger.info("Cleanup complete")


def register_exception_handlers(app: FastAPI) -> None:
    """Map framework and unexpected errors onto the standard error envelope."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return error_response(404, "Endpoint not found", "NOT_FOUND")
        return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(f"Invalid request body on {request.url.path}")
        return error_response(400, "Invalid request body", "INVALID_REQUEST")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error", "INTERNAL_ERROR")


def create_app(
    settings: Settings | None = None,
    container: ApplicationContainer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    container = container or ApplicationContainer.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Heuristic risk scoring for Ethereum, Bitcoin, BNB Smart Chain, "
            "Polygon and Arbitrum addresses using free public explorer APIs."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.container = container

    allowed_origins = settings.get_allowed_origins()
    allow_credentials = "*" not in allowed_origins
    if not allow_credentials and not settings.debug:
        logger.warning("CORS: Using wildcard origins in production is not recommended")

    # Added last runs first: CORS answers preflights before rate limiting
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ClientRateLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
        max_age=86400,
    )

    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(health_router)
    register_exception_handlers(app)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )
