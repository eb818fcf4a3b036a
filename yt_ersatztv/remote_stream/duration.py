"""Duration parsing, padding and resolution for remote stream documents.

Durations travel through the system as ``HH:MM:SS`` text. The YouTube
Data API reports ISO-8601 durations (``PT1H2M3S``); these are normalized
once by :func:`parse_iso8601_duration` and never re-parsed from the API
format afterwards.
"""

import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from yt_ersatztv.models.video import VideoMetadata
    from yt_ersatztv.remote_stream.document import GenerationOptions

ISO8601_DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")

ZERO_DURATION = "00:00:00"

# Sentinel value for the livestream duration preset selector
CUSTOM_LIVESTREAM_DURATION = "custom"


def format_duration(hours: int, minutes: int, seconds: int) -> str:
    """Render components as ``HH:MM:SS`` with at least two digits each."""
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_iso8601_duration(text: str) -> str:
    """Convert an ISO-8601 ``PT#H#M#S`` duration to ``HH:MM:SS``.

    Unrecognized input (empty string, day-based durations such as ``P1D``)
    yields ``00:00:00``. Hours are not capped, so ``PT100H`` becomes
    ``100:00:00``.
    """
    match = ISO8601_DURATION_PATTERN.search(text or "")
    if not match:
        return ZERO_DURATION

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return format_duration(hours, minutes, seconds)


def pad_to_interval(duration: str, interval_minutes: int) -> str:
    """Round an ``HH:MM:SS`` duration up to a multiple of ``interval_minutes``.

    Any residual seconds count as a full minute before rounding. Seconds
    are always ``00`` in the result and a zero duration stays zero.
    """
    hours, minutes, seconds = (int(part) for part in duration.split(":"))
    total_minutes = hours * 60 + minutes + (1 if seconds > 0 else 0)

    padded_minutes = math.ceil(total_minutes / interval_minutes) * interval_minutes
    return format_duration(padded_minutes // 60, padded_minutes % 60, 0)


@dataclass(frozen=True)
class NoDuration:
    """Omit the duration line for VODs."""

    kind: str = "none"


@dataclass(frozen=True)
class CustomDuration:
    """Use a fixed ``HH:MM:SS`` duration for VODs."""

    value: str
    kind: str = "custom"


@dataclass(frozen=True)
class ApiDuration:
    """Use the duration reported by YouTube."""

    kind: str = "api"


@dataclass(frozen=True)
class PaddedApiDuration:
    """Use the YouTube duration rounded up to ``interval`` minutes."""

    interval: int
    kind: str = "api-padded"


DurationPolicy = Union[NoDuration, CustomDuration, ApiDuration, PaddedApiDuration]


def resolve_duration(
    metadata: "VideoMetadata", options: "GenerationOptions"
) -> Optional[str]:
    """Decide the effective ``duration`` value for a document.

    Live content uses the livestream preset (or the custom livestream
    duration when the preset is ``"custom"``). When
    ``options.always_include_live_duration`` is disabled, live content only
    gets a duration if the VOD policy is something other than
    :class:`NoDuration`.

    VOD content follows ``options.duration``. The policy is assumed to be
    valid; request schemas reject malformed combinations before this runs.
    """
    policy = options.duration

    if metadata.is_live:
        if not options.always_include_live_duration and isinstance(policy, NoDuration):
            return None
        if options.livestream_duration == CUSTOM_LIVESTREAM_DURATION:
            return options.custom_livestream_duration
        return options.livestream_duration

    if isinstance(policy, CustomDuration):
        return policy.value
    if isinstance(policy, ApiDuration):
        return metadata.duration
    if isinstance(policy, PaddedApiDuration):
        return pad_to_interval(metadata.duration, policy.interval)
    return None
