"""Metadata provider implementations."""

from yt_ersatztv.providers.base import MetadataProvider
from yt_ersatztv.providers.exceptions import (
    ConfigurationError,
    InvalidOptionsError,
    InvalidURLError,
    PlaylistNotFoundError,
    ProviderError,
    UpstreamAPIError,
    VideoNotFoundError,
)
from yt_ersatztv.providers.youtube import CacheTTLs, YouTubeDataClient

__all__ = [
    "MetadataProvider",
    "YouTubeDataClient",
    "CacheTTLs",
    "ProviderError",
    "InvalidURLError",
    "InvalidOptionsError",
    "VideoNotFoundError",
    "PlaylistNotFoundError",
    "UpstreamAPIError",
    "ConfigurationError",
]
