"""Remote stream YAML document generation.

Builds the ErsatzTV remote stream descriptor for a single video. Field
order is fixed::

    script: "yt-dlp <url> <options> -o -"
    is_live: false
    duration: 00:15:00
    title: "..."
    plot: |
      ...
    year: 2009
    content_rating: "..."

Only ``script`` and ``is_live`` are always present.
"""

import re
from dataclasses import dataclass, field
from typing import List, Literal, Optional

import structlog

from yt_ersatztv.models.video import VideoMetadata
from yt_ersatztv.remote_stream.duration import DurationPolicy, NoDuration, resolve_duration
from yt_ersatztv.remote_stream.scalars import block_scalar, plain_scalar, quoted_scalar

logger = structlog.get_logger(__name__)

PlotFormat = Literal["string", "folded", "literal"]

VIDEO_URL_PLACEHOLDER = "{VIDEO_URL}"

YEAR_PATTERN = re.compile(r"^(\d{4})")


@dataclass(frozen=True)
class GenerationOptions:
    """User-selected options for a remote stream document."""

    duration: DurationPolicy = field(default_factory=NoDuration)
    livestream_duration: str = "00:00:00"
    custom_livestream_duration: str = ""
    script_options: str = ""
    script_template: Optional[str] = None
    include_title: bool = False
    include_plot: bool = False
    plot_format: PlotFormat = "string"
    include_year: bool = False
    include_content_rating: bool = False
    content_rating: str = ""
    always_include_live_duration: bool = True


def build_script(metadata: VideoMetadata, options: GenerationOptions) -> str:
    """Interpolate the shell command ErsatzTV runs to obtain the stream."""
    if options.script_template is not None:
        return options.script_template.replace(VIDEO_URL_PLACEHOLDER, metadata.video_url)
    return f"yt-dlp {metadata.video_url} {options.script_options} -o -"


def extract_year(published_at: Optional[str]) -> Optional[str]:
    """Return the leading four-digit year of an ISO-8601 timestamp.

    The string is read directly rather than parsed as a datetime so that
    timezone offsets cannot shift the year.
    """
    if not published_at:
        return None
    match = YEAR_PATTERN.match(published_at)
    return match.group(1) if match else None


def format_plot(description: str, plot_format: PlotFormat) -> str:
    if plot_format == "folded":
        return block_scalar("plot", description, "folded")
    if plot_format == "literal":
        return block_scalar("plot", description, "literal")
    return quoted_scalar("plot", description)


def generate_document(metadata: VideoMetadata, options: GenerationOptions) -> str:
    """Render the remote stream YAML for ``metadata``.

    Args:
        metadata: Normalized video metadata
        options: Generation options

    Returns:
        YAML text, lines joined by ``\\n`` without a trailing newline
    """
    lines: List[str] = [
        quoted_scalar("script", build_script(metadata, options)),
        plain_scalar("is_live", "true" if metadata.is_live else "false"),
    ]

    duration = resolve_duration(metadata, options)
    if duration is not None:
        lines.append(plain_scalar("duration", duration))

    if options.include_title:
        lines.append(quoted_scalar("title", metadata.title))

    if options.include_plot and metadata.description:
        lines.append(format_plot(metadata.description, options.plot_format))

    if options.include_year:
        year = extract_year(metadata.published_at)
        if year:
            lines.append(plain_scalar("year", year))

    if options.include_content_rating and options.content_rating.strip():
        lines.append(quoted_scalar("content_rating", options.content_rating))

    logger.debug(
        "document_generated",
        video_id=metadata.video_id,
        is_live=metadata.is_live,
        duration=duration,
        line_count=len(lines),
    )
    return "\n".join(lines)
