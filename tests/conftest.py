"""Pytest configuration and shared fixtures"""

import os
from typing import Any, Dict, List, Optional, Sequence

import pytest

from yt_ersatztv.models.video import Thumbnail, Thumbnails, VideoMetadata
from yt_ersatztv.providers.base import MetadataProvider
from yt_ersatztv.providers.exceptions import PlaylistNotFoundError, VideoNotFoundError


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables before each test"""
    # Clear any APP_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("APP_"):
            monkeypatch.delenv(key, raising=False)


def make_metadata(
    video_id: str = "dQw4w9WgXcQ",
    title: str = "Rick Astley - Never Gonna Give You Up",
    description: str = "The official video",
    duration: str = "00:03:33",
    is_live: bool = False,
    published_at: Optional[str] = "2009-10-25T06:57:33Z",
    thumbnails: Optional[Thumbnails] = None,
) -> VideoMetadata:
    return VideoMetadata(
        title=title,
        description=description,
        duration=duration,
        is_live=is_live,
        video_url=f"https://www.youtube.com/watch?v={video_id}",
        published_at=published_at,
        video_id=video_id,
        thumbnails=thumbnails,
    )


def make_api_video_item(
    video_id: str = "dQw4w9WgXcQ",
    title: str = "Rick Astley - Never Gonna Give You Up",
    duration: str = "PT3M33S",
    live_details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a `videos` resource item as returned by the Data API."""
    item: Dict[str, Any] = {
        "id": video_id,
        "snippet": {
            "title": title,
            "description": "The official video",
            "publishedAt": "2009-10-25T06:57:33Z",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg", "width": 120, "height": 90},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg", "width": 480, "height": 360},
            },
        },
        "contentDetails": {"duration": duration},
    }
    if live_details is not None:
        item["liveStreamingDetails"] = live_details
    return item


class FakeMetadataProvider(MetadataProvider):
    """In-memory provider for service and API tests."""

    def __init__(
        self,
        videos: Optional[Dict[str, VideoMetadata]] = None,
        playlists: Optional[Dict[str, List[str]]] = None,
    ):
        self.videos = videos or {}
        self.playlists = playlists or {}
        self.requested_limits: List[Optional[int]] = []

    async def get_video_metadata(self, video_id: str) -> VideoMetadata:
        if video_id not in self.videos:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        return self.videos[video_id]

    async def get_videos_metadata(self, video_ids: Sequence[str]) -> Dict[str, VideoMetadata]:
        return {vid: self.videos[vid] for vid in video_ids if vid in self.videos}

    async def get_playlist_video_ids(
        self, playlist_id: str, limit: Optional[int] = None
    ) -> List[str]:
        self.requested_limits.append(limit)
        ids = self.playlists.get(playlist_id)
        if not ids:
            raise PlaylistNotFoundError(f"Playlist not found or empty: {playlist_id}")
        return ids[:limit] if limit else list(ids)


@pytest.fixture
def sample_metadata() -> VideoMetadata:
    return make_metadata()


@pytest.fixture
def sample_thumbnails() -> Thumbnails:
    return Thumbnails(
        default=Thumbnail(url="https://i.ytimg.com/vi/x/default.jpg", width=120, height=90),
        medium=Thumbnail(url="https://i.ytimg.com/vi/x/mqdefault.jpg", width=320, height=180),
        high=Thumbnail(url="https://i.ytimg.com/vi/x/hqdefault.jpg", width=480, height=360),
    )


@pytest.fixture
def metadata_factory():
    return make_metadata


@pytest.fixture
def api_item_factory():
    return make_api_video_item


@pytest.fixture
def fake_provider_cls():
    return FakeMetadataProvider
