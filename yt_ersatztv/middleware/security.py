"""Response hardening and request context middleware."""

from typing import Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from yt_ersatztv.core.logging import clear_request_id, set_request_id

SECURITY_HEADERS: Dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; form-action 'none'"
    ),
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

REQUEST_ID_HEADER = "X-Request-ID"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the security headers to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request_id to the logging context for the lifetime of a request.

    An incoming ``X-Request-ID`` header is honoured; otherwise a new
    ``req_<12 hex>`` id is generated. The id is echoed in the response.
    """

    MAX_REQUEST_ID_LENGTH = 64

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        if incoming and len(incoming) > self.MAX_REQUEST_ID_LENGTH:
            incoming = None

        request_id = set_request_id(incoming or None)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
