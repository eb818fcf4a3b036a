"""ZIP packaging of playlist documents."""

import io
import zipfile
from typing import Iterable

import structlog

from yt_ersatztv.services.conversion import ConvertedVideo

logger = structlog.get_logger(__name__)

ARCHIVE_FILENAME = "playlist-yamls.zip"
ARCHIVE_MEDIA_TYPE = "application/zip"


def build_playlist_archive(videos: Iterable[ConvertedVideo]) -> bytes:
    """
    Pack generated documents into a deflated ZIP archive.

    Args:
        videos: Converted videos; each becomes one entry named by its filename

    Returns:
        Archive bytes
    """
    buffer = io.BytesIO()
    count = 0
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for video in videos:
            archive.writestr(video.filename, video.yaml.encode("utf-8"))
            count += 1

    data = buffer.getvalue()
    logger.debug("playlist_archive_built", entries=count, size=len(data))
    return data
