"""Rate limiting middleware for FastAPI.

This module provides HTTP middleware for enforcing per-client rate limits
on the conversion endpoints.
"""

from typing import FrozenSet, Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from yt_ersatztv.core.errors import ERROR_SUGGESTIONS, ErrorCode, build_error_response
from yt_ersatztv.core.logging import hash_client_id
from yt_ersatztv.core.metrics import MetricsCollector
from yt_ersatztv.core.rate_limiter import RateLimiter

logger = structlog.get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Resolve the caller address.

    Prefers the ``cf-connecting-ip`` header, then the first hop of
    ``x-forwarded-for``, then the socket peer.
    """
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """HTTP middleware for rate limiting API requests.

    This middleware checks each request against the rate limiter and returns
    HTTP 429 with Retry-After header when limits are exceeded.

    Excluded paths (health checks, docs, etc.) are not rate limited.
    """

    # Paths that don't require rate limiting
    DEFAULT_EXCLUDED_PATHS: FrozenSet[str] = frozenset(
        {
            "/health",
            "/liveness",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/metrics",
        }
    )

    def __init__(
        self,
        app: ASGIApp,
        rate_limiter: RateLimiter,
        excluded_paths: Optional[FrozenSet[str]] = None,
    ) -> None:
        """Initialize rate limit middleware.

        Args:
            app: The ASGI application
            rate_limiter: RateLimiter instance holding the bucket store
            excluded_paths: Paths to exclude from rate limiting.
        """
        super().__init__(app)
        self.rate_limiter = rate_limiter
        self.excluded_paths = excluded_paths or self.DEFAULT_EXCLUDED_PATHS

    def _is_excluded_path(self, path: str) -> bool:
        normalized = path.rstrip("/")
        return normalized in self.excluded_paths or any(
            normalized.startswith(excluded) for excluded in self.excluded_paths
        )

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request through rate limiting.

        Args:
            request: The incoming request
            call_next: The next middleware/handler in chain

        Returns:
            Response from next handler or 429 if rate limited
        """
        path = request.url.path

        if self._is_excluded_path(path) or request.method == "OPTIONS":
            return await call_next(request)

        category = self.rate_limiter.get_endpoint_category(path)
        if category is None:
            return await call_next(request)

        client_ip = get_client_ip(request)
        result = await self.rate_limiter.check_rate_limit(client_ip, category)

        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
        }

        if not result.allowed:
            retry_after = int(result.retry_after) + 1
            logger.warning(
                "rate_limit_exceeded",
                path=path,
                category=category,
                client_hash=hash_client_id(client_ip),
                retry_after=result.retry_after,
            )
            MetricsCollector.record_rate_limit_exceeded(category)

            headers["Retry-After"] = str(retry_after)
            return JSONResponse(
                status_code=429,
                headers=headers,
                content=build_error_response(
                    error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
                    message=(
                        f"Rate limit exceeded for {category} operations. "
                        f"Please try again in {retry_after} seconds."
                    ),
                    suggestion=ERROR_SUGGESTIONS.get(ErrorCode.RATE_LIMIT_EXCEEDED),
                ),
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
