"""Data models for the application."""

from yt_ersatztv.models.video import Thumbnail, Thumbnails, UrlParseResult, VideoMetadata

__all__ = [
    "Thumbnail",
    "Thumbnails",
    "UrlParseResult",
    "VideoMetadata",
]
