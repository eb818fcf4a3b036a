"""Structured logging for the conversion service.

Every log event carries the id of the HTTP request that produced it, so a
conversion can be traced from the request through the YouTube Data API
calls and cache lookups to the generated document.
"""

import contextvars
import hashlib
import logging
import sys
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog

REQUEST_ID_PREFIX = "req_"
CLIENT_HASH_LENGTH = 16

# httpx logs full request URLs at INFO, and those carry the Data API key
QUIET_LOGGERS = ("httpx", "httpcore")

request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def hash_client_id(client_id: str) -> str:
    """
    Hash a client address so rate limiting events never log raw IPs

    Args:
        client_id: Client IP as resolved by the rate limit middleware

    Returns:
        Identifier in format "sha256:<16 hex chars>", stable per client
    """
    digest = hashlib.sha256(client_id.encode()).hexdigest()
    return f"sha256:{digest[:CLIENT_HASH_LENGTH]}"


def add_request_id(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor adding the current request_id, when one is bound."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Route structlog through stdlib logging on stdout

    Called once from create_app with the ``logging`` config section.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for deployments, "console" for local development
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind the id of the request being served

    Args:
        request_id: Id from the ``X-Request-ID`` header; a ``req_<12 hex>``
            id is generated when omitted

    Returns:
        The request_id that was bound
    """
    if request_id is None:
        request_id = f"{REQUEST_ID_PREFIX}{uuid4().hex[:12]}"
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Id of the request being served, used in error bodies and log events"""
    return request_id_var.get()


def clear_request_id() -> None:
    request_id_var.set(None)
