"""YouTube Data API v3 metadata provider."""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from yt_ersatztv.core.cache import CacheStore
from yt_ersatztv.core.metrics import MetricsCollector
from yt_ersatztv.models.video import Thumbnails, VideoMetadata
from yt_ersatztv.providers.base import MetadataProvider
from yt_ersatztv.providers.exceptions import (
    ConfigurationError,
    PlaylistNotFoundError,
    UpstreamAPIError,
    VideoNotFoundError,
)
from yt_ersatztv.remote_stream.duration import parse_iso8601_duration

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3"
WATCH_URL = "https://www.youtube.com/watch?v={}"


@dataclass(frozen=True)
class CacheTTLs:
    """Cache lifetimes in seconds."""

    video: float = 3600
    live: float = 300
    playlist: float = 1800


def is_live_broadcast(live_details: Optional[Dict[str, Any]]) -> bool:
    """A video is live once it has started and has not yet ended.

    Scheduled broadcasts that have not started are not live.
    """
    if not live_details:
        return False
    return bool(live_details.get("actualStartTime")) and not live_details.get("actualEndTime")


def video_from_api_item(item: Dict[str, Any]) -> VideoMetadata:
    """Normalize a `videos` resource item into VideoMetadata."""
    video_id = item["id"]
    snippet = item.get("snippet") or {}
    content_details = item.get("contentDetails") or {}

    return VideoMetadata(
        title=snippet.get("title", ""),
        description=snippet.get("description") or "",
        duration=parse_iso8601_duration(content_details.get("duration", "")),
        is_live=is_live_broadcast(item.get("liveStreamingDetails")),
        video_url=WATCH_URL.format(video_id),
        published_at=snippet.get("publishedAt"),
        video_id=video_id,
        thumbnails=Thumbnails.from_api(snippet.get("thumbnails")),
    )


class YouTubeDataClient(MetadataProvider):
    """Metadata provider backed by the YouTube Data API v3."""

    VIDEO_PARTS = "contentDetails,snippet,liveStreamingDetails"

    # API limit for the `id` parameter of /videos
    MAX_IDS_PER_REQUEST = 50

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: CacheStore,
        base_url: str = DEFAULT_BASE_URL,
        ttls: Optional[CacheTTLs] = None,
        max_results_per_page: int = 50,
        max_concurrent_requests: int = 4,
    ):
        """
        Initialize YouTube Data API client.

        Args:
            api_key: YouTube Data API key
            http_client: Shared async HTTP client
            cache: Store for video and playlist lookups
            base_url: API base URL
            ttls: Cache lifetimes
            max_results_per_page: Page size for playlistItems (1-50)
            max_concurrent_requests: Parallel /videos batches
        """
        self.api_key = api_key
        self.http_client = http_client
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.ttls = ttls or CacheTTLs()
        self.max_results_per_page = max_results_per_page
        self.max_concurrent_requests = max(1, max_concurrent_requests)

    async def _request(self, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("YouTube API key is not configured")

        url = f"{self.base_url}/{resource}"
        try:
            response = await self.http_client.get(url, params={**params, "key": self.api_key})
        except httpx.HTTPError as e:
            MetricsCollector.record_youtube_request(resource, "error")
            logger.error("youtube_request_failed", resource=resource, error=str(e))
            raise UpstreamAPIError(f"YouTube API request failed: {e}") from e

        MetricsCollector.record_youtube_request(resource, str(response.status_code))

        if not response.is_success:
            logger.warning(
                "youtube_api_error",
                resource=resource,
                status_code=response.status_code,
            )
            raise UpstreamAPIError(
                f"YouTube API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamAPIError("YouTube API returned an invalid response") from e

    async def _cache_get(self, key: str) -> Optional[Any]:
        try:
            value = await self.cache.get(key)
        except Exception as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            value = None

        MetricsCollector.record_cache_lookup(value is not None)
        if value is not None:
            logger.debug("cache_hit", key=key)
        return value

    async def _cache_put(self, key: str, value: Any, ttl: float) -> None:
        try:
            await self.cache.put(key, value, ttl)
        except Exception as e:
            logger.warning("cache_write_failed", key=key, error=str(e))

    async def _store_video(self, metadata: VideoMetadata) -> None:
        ttl = self.ttls.live if metadata.is_live else self.ttls.video
        await self._cache_put(f"video:{metadata.video_id}", metadata, ttl)

    async def get_video_metadata(self, video_id: str) -> VideoMetadata:
        cached = await self._cache_get(f"video:{video_id}")
        if cached is not None:
            return cached

        data = await self._request("videos", {"id": video_id, "part": self.VIDEO_PARTS})
        items = data.get("items") or []
        if not items:
            raise VideoNotFoundError(f"Video not found: {video_id}")

        metadata = video_from_api_item(items[0])
        await self._store_video(metadata)

        logger.info("video_metadata_fetched", video_id=video_id, is_live=metadata.is_live)
        return metadata

    async def _fetch_batch(
        self, video_ids: Sequence[str], semaphore: asyncio.Semaphore
    ) -> List[VideoMetadata]:
        async with semaphore:
            data = await self._request(
                "videos",
                {
                    "id": ",".join(video_ids),
                    "part": self.VIDEO_PARTS,
                    "maxResults": len(video_ids),
                },
            )
        return [video_from_api_item(item) for item in data.get("items") or []]

    async def get_videos_metadata(self, video_ids: Sequence[str]) -> Dict[str, VideoMetadata]:
        unique_ids = list(dict.fromkeys(video_ids))
        found: Dict[str, VideoMetadata] = {}
        missing: List[str] = []

        for video_id in unique_ids:
            cached = await self._cache_get(f"video:{video_id}")
            if cached is not None:
                found[video_id] = cached
            else:
                missing.append(video_id)

        if missing:
            semaphore = asyncio.Semaphore(self.max_concurrent_requests)
            batches = [
                missing[i : i + self.MAX_IDS_PER_REQUEST]
                for i in range(0, len(missing), self.MAX_IDS_PER_REQUEST)
            ]
            results = await asyncio.gather(
                *(self._fetch_batch(batch, semaphore) for batch in batches)
            )
            for batch_result in results:
                for metadata in batch_result:
                    found[metadata.video_id] = metadata
                    await self._store_video(metadata)

            logger.info(
                "video_batch_fetched",
                requested=len(missing),
                batches=len(batches),
                returned=sum(len(r) for r in results),
            )

        return {video_id: found[video_id] for video_id in unique_ids if video_id in found}

    async def get_playlist_video_ids(
        self, playlist_id: str, limit: Optional[int] = None
    ) -> List[str]:
        cache_key = f"playlist:{playlist_id}"
        cached = await self._cache_get(cache_key)
        if cached is not None:
            return list(cached[:limit]) if limit else list(cached)

        video_ids: List[str] = []
        page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {
                "playlistId": playlist_id,
                "part": "snippet",
                "maxResults": self.max_results_per_page,
            }
            if page_token:
                params["pageToken"] = page_token

            data = await self._request("playlistItems", params)
            items = data.get("items") or []
            if not items:
                break

            for item in items:
                resource_id = (item.get("snippet") or {}).get("resourceId") or {}
                video_id = resource_id.get("videoId")
                if video_id:
                    video_ids.append(video_id)

            if limit and len(video_ids) >= limit:
                video_ids = video_ids[:limit]
                break

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        if not video_ids:
            raise PlaylistNotFoundError(f"Playlist not found or empty: {playlist_id}")

        await self._cache_put(cache_key, tuple(video_ids), self.ttls.playlist)

        logger.info("playlist_items_fetched", playlist_id=playlist_id, count=len(video_ids))
        return video_ids
