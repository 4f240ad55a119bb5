"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from agriqual.config import RATE_LIMIT_ENABLED
from agriqual.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Enforces per-client rate limiting. Returns HTTP 429 when the limit is exceeded."""

    # Paths that should bypass rate limiting
    BYPASS_PATHS = {
        "/api/weather/health",
        "/api/weather/info",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
    }

    def __init__(
        self,
        app,
        rate_limiter: Optional[RateLimiter] = None,
        enabled: bool = RATE_LIMIT_ENABLED
    ):
        """Initialize rate limit middleware.

        Args:
            app: FastAPI application instance
            rate_limiter: Rate limiter instance (creates default if None)
            enabled: Whether limits are enforced
        """
        super().__init__(app)
        self.rate_limiter = rate_limiter or RateLimiter()
        self.enabled = enabled
        logger.info(
            f"Rate limit enabled: {self.enabled}, limit: {self.rate_limiter.max_requests} "
            f"req/{self.rate_limiter.window_size:g}s per client"
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/endpoint in chain

        Returns:
            HTTP response (either rate limit error or continued response)
        """
        # Skip rate limiting for bypass paths
        if request.url.path in self.BYPASS_PATHS:
            return await call_next(request)

        # Skip if rate limiting is disabled
        if not self.enabled:
            return await call_next(request)

        # Check rate limit for the calling client
        client_id = request.client.host if request.client else "unknown"
        is_allowed, retry_after = await self.rate_limiter.is_allowed(client_id)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_id} accessing {request.method} {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "message": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        # Process request normally
        response = await call_next(request)

        # Add rate limit headers to response for transparency
        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = f"{self.rate_limiter.window_size:g}"

        return response
