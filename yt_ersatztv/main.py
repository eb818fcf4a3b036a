"""FastAPI application entry point.

This module assembles all components and creates the main application.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from yt_ersatztv import __version__
from yt_ersatztv.api import convert, health, metrics
from yt_ersatztv.api.schemas import RootResponse
from yt_ersatztv.core.cache import CacheStore, MemoryCacheStore, NullCacheStore
from yt_ersatztv.core.config import Config, ConfigService, GenerationConfig
from yt_ersatztv.core.errors import APIError, global_exception_handler
from yt_ersatztv.core.logging import configure_logging
from yt_ersatztv.core.metrics import MetricsCollector, initialize_metrics
from yt_ersatztv.core.rate_limiter import RateLimiter
from yt_ersatztv.middleware.rate_limit import RateLimitMiddleware
from yt_ersatztv.middleware.security import RequestContextMiddleware, SecurityHeadersMiddleware
from yt_ersatztv.providers.exceptions import ProviderError
from yt_ersatztv.providers.youtube import CacheTTLs, YouTubeDataClient
from yt_ersatztv.services.conversion import ConversionService

logger = structlog.get_logger(__name__)

SERVICE_NAME = "YouTube to ErsatzTV API"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics.

    Records request count and duration for all endpoints,
    using FastAPI route templates to normalize paths.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and record metrics."""
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # Fixed label for unmatched routes keeps cardinality bounded
        route = request.scope.get("route")
        endpoint = route.path if route else "/unmatched"

        MetricsCollector.record_request(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
            duration=duration,
        )

        return response


def build_cache_store(config: Config) -> CacheStore:
    if not config.cache.enabled:
        return NullCacheStore()
    return MemoryCacheStore(maxsize=config.cache.maxsize)


async def get_conversion_service(request: Request) -> ConversionService:
    """Get the conversion service created at startup."""
    service = getattr(request.app.state, "conversion_service", None)
    if service is None:
        raise RuntimeError("Conversion service not configured")
    return service


async def get_generation_config(request: Request) -> GenerationConfig:
    return request.app.state.config.generation


def create_lifespan(http_transport: Optional[httpx.AsyncBaseTransport] = None):
    """Build the lifespan handler.

    Args:
        http_transport: Transport for the YouTube API client (tests inject
            an ``httpx.MockTransport``)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager for startup and shutdown."""
        config: Config = app.state.config

        logger.info("application_starting", version=__version__)
        initialize_metrics(__version__)

        if not config.youtube.api_key:
            logger.warning("youtube_api_key_missing")

        async with httpx.AsyncClient(
            timeout=config.youtube.timeout, transport=http_transport
        ) as http_client:
            provider = YouTubeDataClient(
                api_key=config.youtube.api_key,
                http_client=http_client,
                cache=app.state.metadata_cache,
                base_url=config.youtube.base_url,
                ttls=CacheTTLs(
                    video=config.cache.video_ttl,
                    live=config.cache.live_ttl,
                    playlist=config.cache.playlist_ttl,
                ),
                max_results_per_page=config.youtube.max_results_per_page,
                max_concurrent_requests=config.youtube.max_concurrent_requests,
            )
            app.state.conversion_service = ConversionService(
                provider, max_playlist_videos=config.generation.max_playlist_videos
            )

            logger.info(
                "application_started",
                environment=config.security.environment,
                cache_enabled=config.cache.enabled,
                rate_limiting_enabled=config.rate_limiting.enabled,
            )

            yield

            logger.info("application_shutting_down")
            app.state.conversion_service = None

    return lifespan


def create_app(
    config: Optional[Config] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration to use. Loaded through ConfigService if omitted.
        http_transport: Optional transport for outgoing YouTube API requests
    """
    if config is None:
        config = ConfigService().load()

    configure_logging(config.logging.level, config.logging.format)

    app = FastAPI(
        title=SERVICE_NAME,
        description="Generate ErsatzTV remote stream YAML documents from YouTube videos and playlists",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=create_lifespan(http_transport),
    )

    app.state.config = config
    app.state.metadata_cache = build_cache_store(config)
    app.state.conversion_service = None

    # Outermost last: request context wraps everything so 429s carry an id
    if config.rate_limiting.enabled:
        app.state.rate_limit_store = MemoryCacheStore(maxsize=config.cache.maxsize)
        app.add_middleware(
            RateLimitMiddleware,
            rate_limiter=RateLimiter.from_config(
                app.state.rate_limit_store,
                convert_rpm=config.rate_limiting.convert_rpm,
                burst_capacity=config.rate_limiting.burst_capacity,
            ),
        )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Request-ID", "Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining"],
        max_age=86400,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # Register global exception handlers
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(APIError, global_exception_handler)
    app.add_exception_handler(ProviderError, global_exception_handler)
    app.add_exception_handler(HTTPException, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)

    # Convert router dependencies
    app.dependency_overrides[convert.get_conversion_service] = get_conversion_service
    app.dependency_overrides[convert.get_generation_config] = get_generation_config

    app.include_router(health.router)
    app.include_router(convert.router)
    if config.monitoring.metrics_enabled:
        app.include_router(metrics.router)

    @app.get("/", response_model=RootResponse, tags=["health"])
    async def root() -> RootResponse:
        endpoints = {
            "health": "GET /health",
            "convert": "POST /api/convert",
            "convertPlaylist": "POST /api/convert/playlist",
            "convertPlaylistArchive": "POST /api/convert/playlist/archive",
        }
        if config.monitoring.metrics_enabled:
            endpoints["metrics"] = "GET /metrics"
        return RootResponse(name=SERVICE_NAME, version=__version__, endpoints=endpoints)

    return app


# Create the application instance
app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    server = app.state.config.server
    uvicorn.run(app, host=server.host, port=server.port)


if __name__ == "__main__":
    run()
