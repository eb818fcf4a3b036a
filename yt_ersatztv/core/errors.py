"""Centralized error handling for the API.

This module provides standardized error codes, exception-to-response mapping,
and a global exception handler for FastAPI.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from yt_ersatztv.core.logging import get_request_id
from yt_ersatztv.core.metrics import MetricsCollector
from yt_ersatztv.providers.exceptions import (
    ConfigurationError,
    InvalidOptionsError,
    InvalidURLError,
    PlaylistNotFoundError,
    ProviderError,
    UpstreamAPIError,
    VideoNotFoundError,
)

logger = structlog.get_logger(__name__)


class ErrorCode:
    """Standardized error codes for API responses.

    These codes provide machine-readable identifiers for error conditions
    that clients can use to implement error handling logic.
    """

    # Client Errors (4xx)
    INVALID_URL = "INVALID_URL"
    INVALID_OPTIONS = "INVALID_OPTIONS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VIDEO_NOT_FOUND = "VIDEO_NOT_FOUND"
    PLAYLIST_NOT_FOUND = "PLAYLIST_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server Errors (5xx)
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# Error code to HTTP status code mapping
ERROR_CODE_TO_STATUS: Dict[str, int] = {
    # 400 Bad Request
    ErrorCode.INVALID_URL: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_OPTIONS: HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: HTTP_400_BAD_REQUEST,
    # 404 Not Found
    ErrorCode.VIDEO_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.PLAYLIST_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    # 429 Too Many Requests
    ErrorCode.RATE_LIMIT_EXCEEDED: HTTP_429_TOO_MANY_REQUESTS,
    # 5xx
    ErrorCode.UPSTREAM_ERROR: HTTP_502_BAD_GATEWAY,
    ErrorCode.PROVIDER_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.CONFIGURATION_ERROR: HTTP_503_SERVICE_UNAVAILABLE,
}


# User-friendly suggestions for error resolution
ERROR_SUGGESTIONS: Dict[str, str] = {
    ErrorCode.INVALID_URL: (
        "Use a YouTube video URL (youtube.com/watch?v=..., youtu.be/...) "
        "or a playlist URL (youtube.com/playlist?list=...)"
    ),
    ErrorCode.INVALID_OPTIONS: (
        "Script options may only contain yt-dlp flags; shell operators "
        "and output-changing flags are not allowed"
    ),
    ErrorCode.VALIDATION_ERROR: "Check the request body against the API schema at /docs",
    ErrorCode.VIDEO_NOT_FOUND: "The video may be private, deleted, or the ID may be mistyped",
    ErrorCode.PLAYLIST_NOT_FOUND: "The playlist may be private, empty, or deleted",
    ErrorCode.NOT_FOUND: "Check the endpoint path",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Wait for the Retry-After period before making more requests",
    ErrorCode.UPSTREAM_ERROR: "The YouTube Data API request failed. Try again later",
    ErrorCode.PROVIDER_ERROR: "An error occurred with the metadata provider. Try again later",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Contact administrator if the issue persists",
    ErrorCode.CONFIGURATION_ERROR: "The service is missing required configuration (YouTube API key)",
}


# Exception type to error code mapping
# Order matters: subclasses must come before their base classes
EXCEPTION_TO_ERROR_CODE: Dict[Type[Exception], str] = {
    InvalidURLError: ErrorCode.INVALID_URL,
    InvalidOptionsError: ErrorCode.INVALID_OPTIONS,
    VideoNotFoundError: ErrorCode.VIDEO_NOT_FOUND,
    PlaylistNotFoundError: ErrorCode.PLAYLIST_NOT_FOUND,
    UpstreamAPIError: ErrorCode.UPSTREAM_ERROR,
    ConfigurationError: ErrorCode.CONFIGURATION_ERROR,
    # ProviderError must be last (after its subclasses)
    ProviderError: ErrorCode.PROVIDER_ERROR,
}


class APIError(Exception):
    """Structured API error that can be converted to ErrorDetail response."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """Initialize an API error.

        Args:
            error_code: Machine-readable error code from ErrorCode class.
            message: Human-readable error message.
            details: Optional additional details about the error.
            suggestion: Optional suggestion for resolution. If not provided,
                        the default suggestion for the error code is used.
        """
        self.error_code = error_code
        self.message = message
        self.details = details
        self.suggestion = suggestion or ERROR_SUGGESTIONS.get(error_code)
        super().__init__(message)


def map_exception_to_api_error(exc: Exception) -> APIError:
    """Map provider and service exceptions to APIError.

    Dictionary order ensures subclasses are checked before their base classes.
    """
    for exc_type, error_code in EXCEPTION_TO_ERROR_CODE.items():
        if isinstance(exc, exc_type):
            return APIError(error_code, str(exc))
    return APIError(ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


def build_error_response(
    error_code: str,
    message: str,
    details: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a standardized error response dictionary.

    Args:
        error_code: Machine-readable error code.
        message: Human-readable error message.
        details: Optional additional details.
        suggestion: Optional suggestion for resolution.

    Returns:
        Dictionary matching the ErrorDetail schema.
    """
    request_id = get_request_id()
    timestamp = datetime.now(timezone.utc).isoformat()

    response: Dict[str, Any] = {
        "error_code": error_code,
        "message": message,
        "timestamp": timestamp,
    }

    if details:
        response["details"] = details
    if request_id:
        response["request_id"] = request_id
    if suggestion:
        response["suggestion"] = suggestion

    return response


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for FastAPI.

    Converts all exceptions to standardized ErrorDetail responses with
    consistent structure, proper HTTP status codes, and request tracing.
    """
    if isinstance(exc, APIError):
        status_code = ERROR_CODE_TO_STATUS.get(exc.error_code, HTTP_500_INTERNAL_SERVER_ERROR)
        error_code = exc.error_code
        response = build_error_response(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details,
            suggestion=exc.suggestion,
        )
        logger.warning(
            "api_error",
            error_code=exc.error_code,
            message=exc.message,
            path=request.url.path,
        )

    elif isinstance(exc, RequestValidationError):
        status_code = HTTP_400_BAD_REQUEST
        error_code = ErrorCode.VALIDATION_ERROR
        response = build_error_response(
            error_code=error_code,
            message="Request validation failed",
            details=_format_validation_errors(exc),
            suggestion=ERROR_SUGGESTIONS.get(error_code),
        )
        logger.warning("validation_error", path=request.url.path, errors=len(exc.errors()))

    elif isinstance(exc, HTTPException):
        status_code = exc.status_code

        if isinstance(exc.detail, dict) and "error_code" in exc.detail:
            error_code = exc.detail["error_code"]
            message = exc.detail.get("message", str(exc.detail))
            details = exc.detail.get("details")
        else:
            error_code = _status_to_error_code(status_code)
            message = str(exc.detail) if exc.detail else "An error occurred"
            details = None

        response = build_error_response(
            error_code=error_code,
            message=message,
            details=details,
            suggestion=ERROR_SUGGESTIONS.get(error_code),
        )
        logger.warning(
            "http_exception",
            status_code=status_code,
            error_code=error_code,
            path=request.url.path,
        )

    elif isinstance(exc, ProviderError):
        api_error = map_exception_to_api_error(exc)
        status_code = ERROR_CODE_TO_STATUS.get(api_error.error_code, HTTP_500_INTERNAL_SERVER_ERROR)
        error_code = api_error.error_code
        response = build_error_response(
            error_code=api_error.error_code,
            message=api_error.message,
            details=api_error.details,
            suggestion=api_error.suggestion,
        )
        logger.warning(
            "provider_error",
            error_code=api_error.error_code,
            error_type=type(exc).__name__,
            message=str(exc),
            path=request.url.path,
        )

    else:
        # Unexpected error - log with full traceback
        status_code = HTTP_500_INTERNAL_SERVER_ERROR
        error_code = ErrorCode.INTERNAL_ERROR
        response = build_error_response(
            error_code=error_code,
            message="An unexpected error occurred",
            suggestion=ERROR_SUGGESTIONS.get(error_code),
        )
        logger.error(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=request.url.path,
            exc_info=exc,
        )

    MetricsCollector.record_error(error_code, _endpoint_label(request))
    return JSONResponse(status_code=status_code, content=response)


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", "/unmatched")


def _status_to_error_code(status_code: int) -> str:
    """Infer error code from HTTP status code."""
    if status_code == HTTP_400_BAD_REQUEST:
        return ErrorCode.VALIDATION_ERROR
    elif status_code == HTTP_404_NOT_FOUND:
        return ErrorCode.NOT_FOUND
    elif status_code == HTTP_429_TOO_MANY_REQUESTS:
        return ErrorCode.RATE_LIMIT_EXCEEDED
    elif status_code == HTTP_503_SERVICE_UNAVAILABLE:
        return ErrorCode.CONFIGURATION_ERROR
    else:
        return ErrorCode.INTERNAL_ERROR
