"""Prometheus metrics collection for the API.

This module defines and manages Prometheus metrics for monitoring
request rates, conversions, YouTube API usage, cache efficiency and errors.
"""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("yt_ersatztv", "YouTube to ErsatzTV application information")

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Conversion metrics
conversions_total = Counter(
    "conversions_total",
    "Total conversions by kind and status",
    ["kind", "status"],
)

playlist_videos_converted = Histogram(
    "playlist_videos_converted",
    "Number of documents generated per playlist conversion",
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)

# YouTube Data API metrics
youtube_api_requests_total = Counter(
    "youtube_api_requests_total",
    "Total YouTube Data API requests by endpoint and status",
    ["endpoint", "status"],
)

# Cache metrics
cache_lookups_total = Counter(
    "cache_lookups_total",
    "Metadata cache lookups by result",
    ["result"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by error code and endpoint",
    ["error_code", "endpoint"],
)

# Rate limiting metrics
rate_limit_exceeded_total = Counter(
    "rate_limit_exceeded_total",
    "Total rate limit exceeded events",
    ["category"],
)


class MetricsCollector:
    """Centralized metrics collection and update helper.

    Provides static methods for recording various metrics throughout
    the application in a consistent manner.
    """

    @staticmethod
    def record_request(
        method: str,
        endpoint: str,
        status: int,
        duration: float,
    ) -> None:
        """Record HTTP request metrics.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: Normalized endpoint path.
            status: HTTP response status code.
            duration: Request duration in seconds.
        """
        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration)

    @staticmethod
    def record_conversion(kind: str, status: str, documents: int = 1) -> None:
        """Record a conversion.

        Args:
            kind: 'video' or 'playlist'.
            status: 'success' or 'failed'.
            documents: Number of documents generated (playlists only).
        """
        conversions_total.labels(kind=kind, status=status).inc()
        if kind == "playlist" and status == "success":
            playlist_videos_converted.observe(documents)

    @staticmethod
    def record_youtube_request(endpoint: str, status: str) -> None:
        """Record a YouTube Data API call.

        Args:
            endpoint: API resource ('videos' or 'playlistItems').
            status: HTTP status code, or 'error' for transport failures.
        """
        youtube_api_requests_total.labels(endpoint=endpoint, status=status).inc()

    @staticmethod
    def record_cache_lookup(hit: bool) -> None:
        cache_lookups_total.labels(result="hit" if hit else "miss").inc()

    @staticmethod
    def record_error(error_code: str, endpoint: str) -> None:
        """Record an error occurrence.

        Args:
            error_code: Error code from ErrorCode class.
            endpoint: Endpoint where the error occurred.
        """
        errors_total.labels(error_code=error_code, endpoint=endpoint).inc()

    @staticmethod
    def record_rate_limit_exceeded(category: str) -> None:
        rate_limit_exceeded_total.labels(category=category).inc()


def initialize_metrics(version: str) -> None:
    """Initialize application metrics with version information.

    Should be called during application startup.
    """
    app_info.info({"version": version})
