"""Service layer for conversions."""

from yt_ersatztv.services.archive import (
    ARCHIVE_FILENAME,
    ARCHIVE_MEDIA_TYPE,
    build_playlist_archive,
)
from yt_ersatztv.services.conversion import (
    ConversionRequest,
    ConversionService,
    ConvertedVideo,
    PlaylistConversion,
)

__all__ = [
    "ARCHIVE_FILENAME",
    "ARCHIVE_MEDIA_TYPE",
    "build_playlist_archive",
    "ConversionRequest",
    "ConversionService",
    "ConvertedVideo",
    "PlaylistConversion",
]
