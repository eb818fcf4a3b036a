"""Provider-specific exceptions."""


class ProviderError(Exception):
    """Base exception for provider errors."""

    pass


class InvalidURLError(ProviderError):
    """Raised when URL is invalid or unsupported."""

    pass


class InvalidOptionsError(ProviderError):
    """Raised when generation options are rejected (e.g. unsafe script options)."""

    pass


class VideoNotFoundError(ProviderError):
    """Raised when the API returns no item for a video ID."""

    pass


class PlaylistNotFoundError(ProviderError):
    """Raised when a playlist is missing or has no videos."""

    pass


class UpstreamAPIError(ProviderError):
    """Raised when the YouTube Data API fails or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(ProviderError):
    """Raised when the provider is missing required configuration."""

    pass
