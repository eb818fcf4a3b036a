"""Video data models shared by the provider and the document generator."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Optional


@dataclass(frozen=True)
class Thumbnail:
    """A single thumbnail rendition."""

    url: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class Thumbnails:
    """Thumbnail renditions keyed by YouTube resolution name."""

    default: Optional[Thumbnail] = None
    medium: Optional[Thumbnail] = None
    high: Optional[Thumbnail] = None
    standard: Optional[Thumbnail] = None
    maxres: Optional[Thumbnail] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["Thumbnails"]:
        """Build from the `snippet.thumbnails` object of the Data API."""
        if not data:
            return None

        renditions: Dict[str, Thumbnail] = {}
        for name in ("default", "medium", "high", "standard", "maxres"):
            item = data.get(name)
            if item and item.get("url"):
                renditions[name] = Thumbnail(
                    url=item["url"],
                    width=item.get("width"),
                    height=item.get("height"),
                )
        return cls(**renditions) if renditions else None


@dataclass(frozen=True)
class VideoMetadata:
    """Normalized metadata for a single video."""

    title: str
    description: str
    duration: str  # HH:MM:SS
    is_live: bool
    video_url: str
    published_at: Optional[str] = None
    video_id: Optional[str] = None
    thumbnails: Optional[Thumbnails] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UrlParseResult:
    """Canonical identity of a YouTube URL."""

    type: Literal["video", "playlist"]
    id: str
