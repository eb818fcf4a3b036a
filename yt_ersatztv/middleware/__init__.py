"""Middleware package for the API."""

from yt_ersatztv.middleware.rate_limit import RateLimitMiddleware, get_client_ip
from yt_ersatztv.middleware.security import (
    SECURITY_HEADERS,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = [
    "RateLimitMiddleware",
    "get_client_ip",
    "SECURITY_HEADERS",
    "RequestContextMiddleware",
    "SecurityHeadersMiddleware",
]
