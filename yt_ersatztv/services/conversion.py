"""Conversion of YouTube videos and playlists into remote stream documents."""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

import structlog

from yt_ersatztv.core.metrics import MetricsCollector
from yt_ersatztv.core.validation import (
    build_script_template,
    parse_youtube_url,
    sanitize_script_options,
    validate_playlist_url,
    validate_script_template,
    validate_video_url,
)
from yt_ersatztv.models.video import VideoMetadata
from yt_ersatztv.providers.base import MetadataProvider
from yt_ersatztv.providers.exceptions import InvalidOptionsError, InvalidURLError, ProviderError
from yt_ersatztv.remote_stream.document import GenerationOptions, generate_document
from yt_ersatztv.remote_stream.filename import FilenameFormat, document_filename
from yt_ersatztv.remote_stream.thumbnail import ThumbnailResolution, select_thumbnail_url

logger = structlog.get_logger(__name__)

VIDEO_ENDPOINT_HINT = "This endpoint only accepts video URLs. Use /api/convert/playlist for playlists"
PLAYLIST_ENDPOINT_HINT = "This endpoint only accepts playlist URLs. Use /api/convert for single videos"


@dataclass(frozen=True)
class ConversionRequest:
    """A validated-at-the-edge conversion request."""

    url: str
    options: GenerationOptions = field(default_factory=GenerationOptions)
    filename_format: FilenameFormat = "compact"
    thumbnail_resolution: ThumbnailResolution = "highest"


@dataclass(frozen=True)
class ConvertedVideo:
    """One generated document with the metadata it was built from."""

    yaml: str
    filename: str
    metadata: VideoMetadata
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class PlaylistConversion:
    """Result of converting a playlist."""

    playlist_id: str
    videos: List[ConvertedVideo]
    failed_video_ids: List[str]


def deduplicate_filename(filename: str, seen: Dict[str, int]) -> str:
    """Suffix repeated filenames with ``-2``, ``-3``, ... before the extension."""
    count = seen.get(filename, 0) + 1
    seen[filename] = count
    if count == 1:
        return filename

    stem, dot, extension = filename.rpartition(".")
    candidate = f"{stem}-{count}{dot}{extension}" if dot else f"{filename}-{count}"
    if candidate in seen:
        return deduplicate_filename(filename, seen)
    seen[candidate] = 1
    return candidate


class ConversionService:
    """Turns video and playlist URLs into ErsatzTV remote stream documents."""

    def __init__(self, provider: MetadataProvider, max_playlist_videos: int = 500):
        """
        Initialize conversion service.

        Args:
            provider: Source of video and playlist metadata
            max_playlist_videos: Upper bound on documents per playlist
        """
        self.provider = provider
        self.max_playlist_videos = max_playlist_videos

    def prepare_options(self, options: GenerationOptions) -> GenerationOptions:
        """
        Sanitize script options and fix the script template.

        Raises:
            InvalidOptionsError: If the options are unsafe or change the output
        """
        sanitized = sanitize_script_options(options.script_options)
        if not sanitized.is_valid:
            raise InvalidOptionsError(sanitized.error_message or "Invalid script options")

        script_options = sanitized.sanitized_value or ""
        template = options.script_template or build_script_template(script_options)

        template_result = validate_script_template(template)
        if not template_result.is_valid:
            raise InvalidOptionsError(template_result.error_message or "Invalid script template")

        return replace(options, script_options=script_options, script_template=template)

    def _convert(
        self,
        metadata: VideoMetadata,
        request: ConversionRequest,
        options: GenerationOptions,
        index: Optional[int] = None,
    ) -> ConvertedVideo:
        return ConvertedVideo(
            yaml=generate_document(metadata, options),
            filename=document_filename(metadata.title, request.filename_format, index),
            metadata=metadata,
            thumbnail_url=select_thumbnail_url(metadata.thumbnails, request.thumbnail_resolution),
        )

    async def convert_video(self, request: ConversionRequest) -> ConvertedVideo:
        """
        Convert a single video URL.

        Args:
            request: Conversion request with a video URL

        Returns:
            Generated document

        Raises:
            InvalidURLError: If the URL is not a YouTube video URL
            InvalidOptionsError: If the script options are rejected
            VideoNotFoundError: If the video does not exist
            UpstreamAPIError: If the YouTube API request fails
        """
        url_result = validate_video_url(request.url)
        if not url_result.is_valid:
            if validate_playlist_url(request.url).is_valid:
                raise InvalidURLError(VIDEO_ENDPOINT_HINT)
            raise InvalidURLError(url_result.error_message or "Invalid video URL")

        options = self.prepare_options(request.options)

        parsed = parse_youtube_url(url_result.sanitized_value or "")
        if parsed is None or parsed.type != "video":
            raise InvalidURLError(VIDEO_ENDPOINT_HINT)

        try:
            metadata = await self.provider.get_video_metadata(parsed.id)
        except ProviderError:
            MetricsCollector.record_conversion("video", "failed")
            raise

        converted = self._convert(metadata, request, options)
        MetricsCollector.record_conversion("video", "success")

        logger.info(
            "video_converted",
            video_id=parsed.id,
            is_live=metadata.is_live,
            duration_mode=options.duration.kind,
            filename=converted.filename,
        )
        return converted

    async def convert_playlist(self, request: ConversionRequest) -> PlaylistConversion:
        """
        Convert every video of a playlist.

        Videos the API does not return (private, deleted) are reported in
        ``failed_video_ids`` rather than failing the whole playlist.

        Args:
            request: Conversion request with a playlist URL

        Returns:
            Generated documents in playlist order

        Raises:
            InvalidURLError: If the URL is not a YouTube playlist URL
            InvalidOptionsError: If the script options are rejected
            PlaylistNotFoundError: If the playlist is missing or empty
            UpstreamAPIError: If a YouTube API request fails
        """
        url_result = validate_playlist_url(request.url)
        if not url_result.is_valid:
            if validate_video_url(request.url).is_valid:
                raise InvalidURLError(PLAYLIST_ENDPOINT_HINT)
            raise InvalidURLError(url_result.error_message or "Invalid playlist URL")

        options = self.prepare_options(request.options)

        parsed = parse_youtube_url(url_result.sanitized_value or "")
        if parsed is None or parsed.type != "playlist":
            raise InvalidURLError(PLAYLIST_ENDPOINT_HINT)

        try:
            video_ids = await self.provider.get_playlist_video_ids(
                parsed.id, limit=self.max_playlist_videos
            )
            metadata_by_id = await self.provider.get_videos_metadata(video_ids)
        except ProviderError:
            MetricsCollector.record_conversion("playlist", "failed")
            raise

        videos: List[ConvertedVideo] = []
        failed: List[str] = []
        seen_filenames: Dict[str, int] = {}

        for index, video_id in enumerate(video_ids):
            metadata = metadata_by_id.get(video_id)
            if metadata is None:
                logger.warning("playlist_video_unavailable", playlist_id=parsed.id, video_id=video_id)
                failed.append(video_id)
                continue

            converted = self._convert(metadata, request, options, index)
            filename = deduplicate_filename(converted.filename, seen_filenames)
            if filename != converted.filename:
                converted = replace(converted, filename=filename)
            videos.append(converted)

        MetricsCollector.record_conversion("playlist", "success", documents=len(videos))

        logger.info(
            "playlist_converted",
            playlist_id=parsed.id,
            videos=len(videos),
            failed=len(failed),
        )
        return PlaylistConversion(playlist_id=parsed.id, videos=videos, failed_video_ids=failed)
