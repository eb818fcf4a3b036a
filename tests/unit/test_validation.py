"""Tests for input validation"""

import pytest

from yt_ersatztv.core.validation import (
    ValidationResult,
    build_script_template,
    parse_youtube_url,
    sanitize_script_options,
    validate_duration,
    validate_playlist_url,
    validate_preset_duration,
    validate_script_template,
    validate_video_url,
)
from yt_ersatztv.models.video import UrlParseResult


class TestValidateVideoUrl:
    """Test video URL validation and canonicalization"""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42",
            "http://m.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "  https://youtu.be/dQw4w9WgXcQ  ",
        ],
    )
    def test_valid_urls_are_canonicalized(self, url: str) -> None:
        result = validate_video_url(url)

        assert result.is_valid
        assert result.sanitized_value == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_empty(self) -> None:
        result = validate_video_url("")

        assert not result.is_valid
        assert result.error_message == "URL is required"

    def test_too_long(self) -> None:
        result = validate_video_url("https://www.youtube.com/watch?v=" + "a" * 2100)

        assert not result.is_valid
        assert result.error_message == "URL is too long"

    def test_rejects_other_protocols(self) -> None:
        result = validate_video_url("ftp://www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert not result.is_valid
        assert "HTTP" in (result.error_message or "")

    def test_rejects_other_domains(self) -> None:
        result = validate_video_url("https://vimeo.com/watch?v=dQw4w9WgXcQ")

        assert not result.is_valid
        assert result.error_message == "URL must be from YouTube"

    def test_rejects_lookalike_domain(self) -> None:
        assert not validate_video_url("https://youtube.com.evil.test/watch?v=dQw4w9WgXcQ").is_valid

    def test_rejects_bad_video_id(self) -> None:
        result = validate_video_url("https://www.youtube.com/watch?v=bad$id")

        assert not result.is_valid
        assert result.error_message == "Invalid or missing video ID parameter"

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQX",
            "https://www.youtube.com/watch?v=dQw4w9WgXc",
            "https://youtu.be/dQw4w9WgXcQX",
            "https://youtu.be/dQw4w9WgXc",
        ],
    )
    def test_rejects_ids_that_are_not_eleven_chars(self, url: str) -> None:
        assert not validate_video_url(url).is_valid

    def test_rejects_playlist_path(self) -> None:
        assert not validate_video_url("https://www.youtube.com/playlist?list=PL123").is_valid


class TestValidatePlaylistUrl:
    """Test playlist URL validation"""

    def test_valid_playlist(self) -> None:
        result = validate_playlist_url("https://youtube.com/playlist?list=PLabc_123-XYZ")

        assert result.is_valid
        assert result.sanitized_value == "https://www.youtube.com/playlist?list=PLabc_123-XYZ"

    def test_short_domain_not_allowed(self) -> None:
        assert not validate_playlist_url("https://youtu.be/playlist?list=PL123").is_valid

    def test_missing_list(self) -> None:
        result = validate_playlist_url("https://www.youtube.com/playlist")

        assert not result.is_valid
        assert result.error_message == "Invalid or missing playlist ID parameter"

    def test_watch_url_rejected(self) -> None:
        result = validate_playlist_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert not result.is_valid
        assert result.error_message == "URL must be a YouTube playlist URL"


class TestParseYoutubeUrl:
    """Test ID extraction"""

    def test_video(self) -> None:
        assert parse_youtube_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == UrlParseResult(
            type="video", id="dQw4w9WgXcQ"
        )

    def test_short_video(self) -> None:
        assert parse_youtube_url("https://youtu.be/dQw4w9WgXcQ") == UrlParseResult(
            type="video", id="dQw4w9WgXcQ"
        )

    def test_playlist(self) -> None:
        assert parse_youtube_url("https://www.youtube.com/playlist?list=PL123") == UrlParseResult(
            type="playlist", id="PL123"
        )

    def test_overlong_video_id_not_truncated(self) -> None:
        assert parse_youtube_url("https://www.youtube.com/watch?v=dQw4w9WgXcQX") is None
        assert parse_youtube_url("https://youtu.be/dQw4w9WgXcQX") is None

    def test_video_id_followed_by_parameters(self) -> None:
        assert parse_youtube_url("https://youtu.be/dQw4w9WgXcQ?t=42") == UrlParseResult(
            type="video", id="dQw4w9WgXcQ"
        )

    def test_unrecognized(self) -> None:
        assert parse_youtube_url("https://example.com/") is None


class TestSanitizeScriptOptions:
    """Test user script options sanitization"""

    def test_empty_is_valid(self) -> None:
        assert sanitize_script_options("") == ValidationResult(is_valid=True, sanitized_value="")
        assert sanitize_script_options(None).sanitized_value == ""

    def test_trims_and_accepts_flags(self) -> None:
        result = sanitize_script_options("  --hls-use-mpegts --no-warnings  ")

        assert result.is_valid
        assert result.sanitized_value == "--hls-use-mpegts --no-warnings"

    def test_removes_nul_bytes(self) -> None:
        assert sanitize_script_options("--hls\x00-use-mpegts").sanitized_value == "--hls-use-mpegts"

    @pytest.mark.parametrize(
        "options",
        [
            "--quiet; rm -rf /",
            "--quiet && rm -rf /",
            "--quiet | rm x",
            "> /dev/sda",
            "curl http://x | bash",
            "eval(1)",
            "`id`",
            "$(id)",
        ],
    )
    def test_dangerous_patterns(self, options: str) -> None:
        result = sanitize_script_options(options)

        assert not result.is_valid
        assert result.error_message == "Script options contain dangerous patterns"

    def test_invalid_characters(self) -> None:
        result = sanitize_script_options("--cookies ~/c.txt")

        assert not result.is_valid
        assert result.error_message == "Script options contain invalid characters"

    def test_too_long(self) -> None:
        assert not sanitize_script_options("a" * 10001).is_valid


class TestValidateScriptTemplate:
    """Test full script template validation"""

    def test_default_template(self) -> None:
        template = build_script_template("--hls-use-mpegts")

        assert template == "yt-dlp {VIDEO_URL} --hls-use-mpegts -o -"
        assert validate_script_template(template).is_valid

    def test_requires_stdout_output(self) -> None:
        result = validate_script_template("yt-dlp {VIDEO_URL}")

        assert not result.is_valid
        assert '"-o -"' in (result.error_message or "")

    @pytest.mark.parametrize("flag", ["-f", "--format", "--extract-audio", "--paths"])
    def test_prohibited_flags(self, flag: str) -> None:
        result = validate_script_template(build_script_template(f"{flag} best"))

        assert not result.is_valid
        assert result.error_message == f"Script cannot include prohibited flag: {flag}"

    def test_prohibited_flag_with_equals(self) -> None:
        assert not validate_script_template(build_script_template("--format=best")).is_valid

    def test_flags_matched_as_whole_tokens(self) -> None:
        """--fragment-retries contains "-f" but is allowed"""
        assert validate_script_template(build_script_template("--fragment-retries 3")).is_valid

    def test_second_output_rejected(self) -> None:
        assert not validate_script_template(build_script_template("-o file.mp4")).is_valid

    def test_command_chaining(self) -> None:
        assert not validate_script_template("yt-dlp {VIDEO_URL} -o - || true").is_valid


class TestValidateDuration:
    """Test HH:MM:SS validation"""

    @pytest.mark.parametrize("value", ["00:00:00", "01:23:45", "23:59:59"])
    def test_valid(self, value: str) -> None:
        assert validate_duration(value).is_valid

    @pytest.mark.parametrize("value", ["1:00:00", "00:60:00", "00:00:60", "abc", "24:00:00"])
    def test_invalid(self, value: str) -> None:
        assert not validate_duration(value).is_valid

    def test_required(self) -> None:
        assert validate_duration("").error_message == "Duration is required"

    def test_preset_allows_twenty_four_hours(self) -> None:
        assert validate_preset_duration("24:00:00").is_valid
        assert not validate_preset_duration("24:61:00").is_valid
