"""Filename formatting for generated remote stream files."""

import re
from typing import Literal, Optional

FilenameFormat = Literal[
    "original",  # My Video Title
    "compact",  # my-video-title
    "kebab",  # My-Video-Title
    "snake",  # my_video_title
    "sequential-prefix",  # 001-my-video-title (playlists)
    "sequential-suffix",  # my-video-title-001 (playlists)
]

SEQUENTIAL_FORMATS = frozenset({"sequential-prefix", "sequential-suffix"})

DEFAULT_MAX_LENGTH = 200

DOCUMENT_EXTENSION = ".yml"

# Characters illegal in filenames on Windows/Linux/Mac
INVALID_CHARS_PATTERN = re.compile(r'[/\\:*?"<>|]')
WHITESPACE_PATTERN = re.compile(r"\s+")
NON_COMPACT_PATTERN = re.compile(r"[^a-z0-9\s-]", re.IGNORECASE)
NON_SNAKE_PATTERN = re.compile(r"[^a-z0-9\s_]", re.IGNORECASE)
REPEATED_HYPHENS_PATTERN = re.compile(r"-+")


def _remove_invalid_chars(title: str) -> str:
    return INVALID_CHARS_PATTERN.sub("", title)


def _sequence_number(index: int) -> str:
    return f"{index + 1:03d}"


def format_filename(
    title: str,
    filename_format: FilenameFormat,
    index: Optional[int] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> str:
    """Format a video title as a filename stem.

    Args:
        title: Video title
        filename_format: One of the supported filename formats
        index: 0-based playlist position, required for sequential formats
        max_length: Maximum length of the result

    Returns:
        Filename stem without extension

    Raises:
        ValueError: If a sequential format is requested without an index
    """
    if filename_format in SEQUENTIAL_FORMATS:
        if index is None:
            raise ValueError("Index required for sequential format")
        base = format_filename(title, "compact", max_length=max_length - 4)
        if filename_format == "sequential-prefix":
            return f"{_sequence_number(index)}-{base}"
        return f"{base}-{_sequence_number(index)}"

    if filename_format == "original":
        formatted = _remove_invalid_chars(title).strip()
    elif filename_format == "kebab":
        formatted = WHITESPACE_PATTERN.sub("-", _remove_invalid_chars(title))
        formatted = REPEATED_HYPHENS_PATTERN.sub("-", formatted)
    elif filename_format == "snake":
        formatted = WHITESPACE_PATTERN.sub("_", NON_SNAKE_PATTERN.sub("", title)).lower()
    else:
        formatted = WHITESPACE_PATTERN.sub("-", NON_COMPACT_PATTERN.sub("", title)).lower()

    return formatted[:max_length]


def document_filename(
    title: str,
    filename_format: FilenameFormat,
    index: Optional[int] = None,
) -> str:
    """Build the ``.yml`` filename for a generated document.

    Sequential formats only make sense inside a playlist; without an
    index they fall back to ``compact``.
    """
    if filename_format in SEQUENTIAL_FORMATS and index is None:
        filename_format = "compact"

    stem = format_filename(title, filename_format, index)
    return f"{stem or 'video'}{DOCUMENT_EXTENSION}"
