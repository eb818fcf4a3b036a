"""Thumbnail URL selection by preferred resolution."""

import re
from typing import List, Literal, Optional

from yt_ersatztv.models.video import Thumbnail, Thumbnails

ThumbnailResolution = Literal[
    "highest", "maxres", "standard", "high", "medium", "default", "lowest"
]

# Highest to lowest quality
RESOLUTION_ORDER: List[str] = ["maxres", "standard", "high", "medium", "default"]

EXTENSION_PATTERN = re.compile(r"\.(jpg|jpeg|png|webp)(?:\?|$)", re.IGNORECASE)


def _url_at(thumbnails: Thumbnails, name: str) -> Optional[str]:
    thumbnail: Optional[Thumbnail] = getattr(thumbnails, name)
    return thumbnail.url if thumbnail and thumbnail.url else None


def select_thumbnail_url(
    thumbnails: Optional[Thumbnails], resolution: ThumbnailResolution
) -> Optional[str]:
    """Pick a thumbnail URL no larger than ``resolution``.

    A named resolution falls back to smaller renditions when missing.
    ``highest`` and ``lowest`` take the best and worst available.
    """
    if thumbnails is None:
        return None

    if resolution == "lowest":
        candidates = list(reversed(RESOLUTION_ORDER))
    elif resolution == "highest":
        candidates = RESOLUTION_ORDER
    else:
        candidates = RESOLUTION_ORDER[RESOLUTION_ORDER.index(resolution):]

    for name in candidates:
        url = _url_at(thumbnails, name)
        if url:
            return url
    return None


def thumbnail_extension(url: str) -> str:
    """Image extension of a thumbnail URL, ``jpg`` when unknown."""
    match = EXTENSION_PATTERN.search(url)
    return match.group(1).lower() if match else "jpg"
