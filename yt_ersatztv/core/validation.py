"""Input validation utilities for the API layer.

This module provides validation for YouTube URLs, yt-dlp script options
and ``HH:MM:SS`` durations used across the conversion endpoints.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Pattern
from urllib.parse import parse_qs, urlparse

import structlog

from yt_ersatztv.models.video import UrlParseResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Optional[str] = None


class URLValidator:
    """Validates and canonicalizes YouTube video and playlist URLs."""

    VIDEO_DOMAINS: FrozenSet[str] = frozenset(
        {
            "youtube.com",
            "www.youtube.com",
            "m.youtube.com",
            "youtu.be",
        }
    )

    PLAYLIST_DOMAINS: FrozenSet[str] = frozenset(
        {
            "youtube.com",
            "www.youtube.com",
            "m.youtube.com",
        }
    )

    # Guard against oversized input
    MAX_URL_LENGTH = 2048

    VIDEO_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{11}$")
    PLAYLIST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

    # Patterns used to extract canonical IDs from already-validated URLs
    VIDEO_URL_PATTERN = re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})(?=[&#?/]|$)"
    )
    PLAYLIST_URL_PATTERN = re.compile(r"youtube\.com/playlist\?list=([a-zA-Z0-9_-]+)")

    CANONICAL_VIDEO_URL = "https://www.youtube.com/watch?v={}"
    CANONICAL_PLAYLIST_URL = "https://www.youtube.com/playlist?list={}"

    def _precheck(self, url: str, allowed_domains: FrozenSet[str]) -> ValidationResult:
        """Checks shared by video and playlist URLs.

        Returns a result whose sanitized_value is the trimmed URL on success.
        """
        if not url or not isinstance(url, str):
            return ValidationResult(is_valid=False, error_message="URL is required")

        url = url.strip()
        if not url:
            return ValidationResult(is_valid=False, error_message="URL cannot be empty")

        if len(url) > self.MAX_URL_LENGTH:
            return ValidationResult(is_valid=False, error_message="URL is too long")

        try:
            parsed = urlparse(url)
        except ValueError as e:
            logger.warning("url_parsing_failed", url=url, error=str(e))
            return ValidationResult(is_valid=False, error_message="Invalid URL format")

        if parsed.scheme.lower() not in ("http", "https"):
            return ValidationResult(
                is_valid=False, error_message="URL must use HTTP or HTTPS protocol"
            )

        hostname = (parsed.hostname or "").lower()
        if hostname not in allowed_domains:
            logger.debug("domain_not_allowed", url=url, domain=hostname)
            return ValidationResult(is_valid=False, error_message="URL must be from YouTube")

        return ValidationResult(is_valid=True, sanitized_value=url)

    def validate_video_url(self, url: str) -> ValidationResult:
        """
        Validate a YouTube video URL and normalize it.

        Supports ``youtube.com/watch?v=ID`` (www/m variants) and
        ``youtu.be/ID``.

        Args:
            url: URL to validate

        Returns:
            ValidationResult whose sanitized_value is the canonical watch URL
        """
        result = self._precheck(url, self.VIDEO_DOMAINS)
        if not result.is_valid:
            return result

        parsed = urlparse(result.sanitized_value)
        hostname = (parsed.hostname or "").lower()

        if hostname == "youtu.be":
            video_id = parsed.path[1:]
            if not self.VIDEO_ID_PATTERN.match(video_id):
                return ValidationResult(is_valid=False, error_message="Invalid YouTube video ID")
            return ValidationResult(
                is_valid=True, sanitized_value=self.CANONICAL_VIDEO_URL.format(video_id)
            )

        if parsed.path == "/watch":
            video_id = parse_qs(parsed.query).get("v", [""])[0]
            if not self.VIDEO_ID_PATTERN.match(video_id):
                return ValidationResult(
                    is_valid=False, error_message="Invalid or missing video ID parameter"
                )
            return ValidationResult(
                is_valid=True, sanitized_value=self.CANONICAL_VIDEO_URL.format(video_id)
            )

        return ValidationResult(is_valid=False, error_message="URL must be a YouTube video URL")

    def validate_playlist_url(self, url: str) -> ValidationResult:
        """
        Validate a YouTube playlist URL and normalize it.

        Args:
            url: URL to validate

        Returns:
            ValidationResult whose sanitized_value is the canonical playlist URL
        """
        result = self._precheck(url, self.PLAYLIST_DOMAINS)
        if not result.is_valid:
            return result

        parsed = urlparse(result.sanitized_value)
        if parsed.path != "/playlist":
            return ValidationResult(
                is_valid=False, error_message="URL must be a YouTube playlist URL"
            )

        playlist_id = parse_qs(parsed.query).get("list", [""])[0]
        if not self.PLAYLIST_ID_PATTERN.match(playlist_id):
            return ValidationResult(
                is_valid=False, error_message="Invalid or missing playlist ID parameter"
            )

        return ValidationResult(
            is_valid=True, sanitized_value=self.CANONICAL_PLAYLIST_URL.format(playlist_id)
        )

    def parse(self, url: str) -> Optional[UrlParseResult]:
        """
        Extract the video or playlist ID from a URL.

        Args:
            url: YouTube URL

        Returns:
            UrlParseResult, or None if the URL matches neither form
        """
        video_match = self.VIDEO_URL_PATTERN.search(url)
        if video_match:
            return UrlParseResult(type="video", id=video_match.group(1))

        playlist_match = self.PLAYLIST_URL_PATTERN.search(url)
        if playlist_match:
            return UrlParseResult(type="playlist", id=playlist_match.group(1))

        return None


class ScriptOptionsValidator:
    """Validates yt-dlp options embedded in the remote stream script."""

    MAX_OPTIONS_LENGTH = 10000

    REQUIRED_OUTPUT = "-o -"

    # Flags that would change what is written to stdout
    PROHIBITED_FLAGS: FrozenSet[str] = frozenset(
        {
            "-f",
            "--format",
            "--extract-audio",
            "--recode-video",
            "--merge-output-format",
            "--output",
            "--paths",
        }
    )

    DANGEROUS_OPTION_PATTERNS: List[Pattern[str]] = [
        re.compile(r";\s*rm\s", re.IGNORECASE),
        re.compile(r";\s*chmod\s", re.IGNORECASE),
        re.compile(r";\s*chown\s", re.IGNORECASE),
        re.compile(r";\s*dd\s", re.IGNORECASE),
        re.compile(r";\s*mkfs\s", re.IGNORECASE),
        re.compile(r"&&\s*rm\s", re.IGNORECASE),
        re.compile(r"\|\s*rm\s", re.IGNORECASE),
        re.compile(r">\s*/dev/", re.IGNORECASE),
        re.compile(r"curl.*\|\s*bash", re.IGNORECASE),
        re.compile(r"wget.*\|\s*bash", re.IGNORECASE),
        re.compile(r"eval\s*\(", re.IGNORECASE),
        re.compile(r"exec\s*\(", re.IGNORECASE),
        re.compile(r"`.*`"),
        re.compile(r"\$\(.*\)"),
    ]

    # Command chaining is never allowed anywhere in the script
    CHAINING_PATTERNS: List[Pattern[str]] = [
        re.compile(r";"),
        re.compile(r"&&"),
        re.compile(r"\|\|"),
        re.compile(r"`"),
        re.compile(r"\$\("),
    ]

    SAFE_OPTIONS_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_./{}\[\]:]*$")

    def sanitize_options(self, options: Optional[str]) -> ValidationResult:
        """
        Sanitize user-supplied script options.

        Args:
            options: Raw options string

        Returns:
            ValidationResult whose sanitized_value is the trimmed options
        """
        if not options or not isinstance(options, str):
            return ValidationResult(is_valid=True, sanitized_value="")

        if len(options) > self.MAX_OPTIONS_LENGTH:
            return ValidationResult(is_valid=False, error_message="Script options are too long")

        sanitized = options.replace("\x00", "")

        for pattern in self.DANGEROUS_OPTION_PATTERNS:
            if pattern.search(sanitized):
                logger.warning("dangerous_script_options", pattern=pattern.pattern)
                return ValidationResult(
                    is_valid=False, error_message="Script options contain dangerous patterns"
                )

        if not self.SAFE_OPTIONS_PATTERN.match(sanitized):
            return ValidationResult(
                is_valid=False, error_message="Script options contain invalid characters"
            )

        return ValidationResult(is_valid=True, sanitized_value=sanitized.strip())

    def validate_template(self, template: str) -> ValidationResult:
        """
        Validate a full script template such as ``yt-dlp {VIDEO_URL} ... -o -``.

        Args:
            template: Script template

        Returns:
            ValidationResult with validation status
        """
        if self.REQUIRED_OUTPUT not in template:
            return ValidationResult(
                is_valid=False,
                error_message=f'Script must include "{self.REQUIRED_OUTPUT}" for stdout output',
            )

        tokens = template.split()
        for flag in sorted(self.PROHIBITED_FLAGS):
            if flag in tokens or any(token.startswith(f"{flag}=") for token in tokens):
                return ValidationResult(
                    is_valid=False,
                    error_message=f"Script cannot include prohibited flag: {flag}",
                )

        if tokens.count("-o") != 1:
            return ValidationResult(
                is_valid=False, error_message="Script must write to stdout exactly once"
            )

        for pattern in self.CHAINING_PATTERNS:
            if pattern.search(template):
                return ValidationResult(
                    is_valid=False,
                    error_message="Script contains potentially dangerous command chaining or injection",
                )

        return ValidationResult(is_valid=True, sanitized_value=template)


class DurationValidator:
    """Validates ``HH:MM:SS`` durations supplied by users."""

    DURATION_PATTERN = re.compile(r"^(\d{2}):([0-5]\d):([0-5]\d)$")

    MAX_HOURS = 23

    def validate(self, duration: Optional[str], cap_hours: bool = True) -> ValidationResult:
        """
        Validate a duration string.

        Args:
            duration: Duration in ``HH:MM:SS`` format
            cap_hours: Reject hours above 23 (custom durations). Livestream
                presets such as ``24:00:00`` are validated without the cap.

        Returns:
            ValidationResult whose sanitized_value is the trimmed duration
        """
        if not duration or not isinstance(duration, str):
            return ValidationResult(is_valid=False, error_message="Duration is required")

        duration = duration.strip()
        if not duration:
            return ValidationResult(is_valid=False, error_message="Duration cannot be empty")

        match = self.DURATION_PATTERN.match(duration)
        if not match:
            return ValidationResult(
                is_valid=False, error_message="Duration must be in HH:MM:SS format"
            )

        if cap_hours and int(match.group(1)) > self.MAX_HOURS:
            return ValidationResult(
                is_valid=False, error_message="Hours must be between 00 and 23"
            )

        return ValidationResult(is_valid=True, sanitized_value=duration)


# Singleton instances for convenience
url_validator = URLValidator()
script_options_validator = ScriptOptionsValidator()
duration_validator = DurationValidator()


def validate_video_url(url: str) -> ValidationResult:
    return url_validator.validate_video_url(url)


def validate_playlist_url(url: str) -> ValidationResult:
    return url_validator.validate_playlist_url(url)


def parse_youtube_url(url: str) -> Optional[UrlParseResult]:
    return url_validator.parse(url)


def sanitize_script_options(options: Optional[str]) -> ValidationResult:
    return script_options_validator.sanitize_options(options)


def validate_script_template(template: str) -> ValidationResult:
    return script_options_validator.validate_template(template)


def validate_duration(duration: Optional[str]) -> ValidationResult:
    """Validate a custom ``HH:MM:SS`` duration (hours 00-23)."""
    return duration_validator.validate(duration)


def validate_preset_duration(duration: Optional[str]) -> ValidationResult:
    """Validate a livestream preset duration (no hour cap)."""
    return duration_validator.validate(duration, cap_hours=False)


def build_script_template(options: str) -> str:
    """Wrap sanitized yt-dlp options into a ``{VIDEO_URL}`` script template."""
    return f"yt-dlp {{VIDEO_URL}} {options} -o -"
