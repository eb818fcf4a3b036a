"""Abstract base class for metadata providers."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from yt_ersatztv.models.video import VideoMetadata


class MetadataProvider(ABC):
    """Abstract source of video and playlist metadata."""

    @abstractmethod
    async def get_video_metadata(self, video_id: str) -> VideoMetadata:
        """
        Fetch metadata for a single video.

        Args:
            video_id: YouTube video ID

        Returns:
            Normalized video metadata

        Raises:
            VideoNotFoundError: If the video does not exist or is private
            UpstreamAPIError: If the API request fails
            ConfigurationError: If the provider is not configured
        """
        pass

    @abstractmethod
    async def get_videos_metadata(self, video_ids: Sequence[str]) -> Dict[str, VideoMetadata]:
        """
        Fetch metadata for many videos.

        Args:
            video_ids: YouTube video IDs

        Returns:
            Mapping of video ID to metadata for the videos that were found

        Raises:
            UpstreamAPIError: If an API request fails
            ConfigurationError: If the provider is not configured
        """
        pass

    @abstractmethod
    async def get_playlist_video_ids(
        self, playlist_id: str, limit: Optional[int] = None
    ) -> List[str]:
        """
        List the video IDs of a playlist in playlist order.

        Args:
            playlist_id: YouTube playlist ID
            limit: Stop after this many IDs

        Returns:
            Video IDs

        Raises:
            PlaylistNotFoundError: If the playlist is missing or empty
            UpstreamAPIError: If an API request fails
            ConfigurationError: If the provider is not configured
        """
        pass
