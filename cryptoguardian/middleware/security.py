"""Per-client rate limiting and security headers."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
}


def client_ip(request: Request) -> str:
    """Best-effort client IP, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class ClientRateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed the per-IP request budget."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Count the request against the caller's window."""
        if request.method == "OPTIONS":
            return await call_next(request)

        limiter = request.app.state.container.client_rate_limiter
        ip = client_ip(request)
        decision = limiter.hit(ip)

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {ip}")
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "Too many requests. Please try again later.",
                    "code": "RATE_LIMIT",
                    "retryAfter": decision.retry_after,
                },
                headers={"Retry-After": str(decision.retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers and the response time to every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
