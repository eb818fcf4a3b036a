"""Tests for the conversion service"""

import io
import zipfile

import pytest

from yt_ersatztv.providers.exceptions import (
    InvalidOptionsError,
    InvalidURLError,
    PlaylistNotFoundError,
    VideoNotFoundError,
)
from yt_ersatztv.remote_stream.document import GenerationOptions
from yt_ersatztv.remote_stream.duration import ApiDuration
from yt_ersatztv.services.archive import build_playlist_archive
from yt_ersatztv.services.conversion import (
    ConversionRequest,
    ConversionService,
    deduplicate_filename,
)

VIDEO_URL = "https://youtu.be/dQw4w9WgXcQ"
PLAYLIST_URL = "https://www.youtube.com/playlist?list=PL123"


@pytest.fixture
def service(fake_provider_cls, metadata_factory, sample_thumbnails) -> ConversionService:
    videos = {
        "dQw4w9WgXcQ": metadata_factory(thumbnails=sample_thumbnails),
        "aaaaaaaaaaa": metadata_factory(video_id="aaaaaaaaaaa", title="Same Title"),
        "bbbbbbbbbbb": metadata_factory(video_id="bbbbbbbbbbb", title="Same Title"),
    }
    playlists = {"PL123": ["aaaaaaaaaaa", "private0000", "bbbbbbbbbbb"]}
    return ConversionService(fake_provider_cls(videos, playlists), max_playlist_videos=50)


def api_options(script_options: str = "--hls-use-mpegts") -> GenerationOptions:
    return GenerationOptions(duration=ApiDuration(), script_options=script_options)


class TestConvertVideo:
    """Test single video conversion"""

    @pytest.mark.asyncio
    async def test_generates_document(self, service: ConversionService) -> None:
        converted = await service.convert_video(ConversionRequest(url=VIDEO_URL, options=api_options()))

        assert converted.yaml == (
            'script: "yt-dlp https://www.youtube.com/watch?v=dQw4w9WgXcQ --hls-use-mpegts -o -"\n'
            "is_live: false\n"
            "duration: 00:03:33"
        )
        assert converted.filename == "rick-astley---never-gonna-give-you-up.yml"
        assert converted.thumbnail_url == "https://i.ytimg.com/vi/x/hqdefault.jpg"

    @pytest.mark.asyncio
    async def test_sequential_format_falls_back(self, service: ConversionService) -> None:
        request = ConversionRequest(url=VIDEO_URL, options=api_options(), filename_format="sequential-prefix")

        converted = await service.convert_video(request)

        assert converted.filename == "rick-astley---never-gonna-give-you-up.yml"

    @pytest.mark.asyncio
    async def test_playlist_url_rejected(self, service: ConversionService) -> None:
        with pytest.raises(InvalidURLError, match="/api/convert/playlist"):
            await service.convert_video(ConversionRequest(url=PLAYLIST_URL, options=api_options()))

    @pytest.mark.asyncio
    async def test_overlong_video_id_rejected(self, service: ConversionService) -> None:
        request = ConversionRequest(
            url="https://www.youtube.com/watch?v=dQw4w9WgXcQX", options=api_options()
        )

        with pytest.raises(InvalidURLError, match="Invalid or missing video ID parameter"):
            await service.convert_video(request)

    @pytest.mark.asyncio
    async def test_short_video_id_rejected(self, service: ConversionService) -> None:
        request = ConversionRequest(url="https://youtu.be/dQw4w9WgXc", options=api_options())

        with pytest.raises(InvalidURLError, match="Invalid YouTube video ID"):
            await service.convert_video(request)

    @pytest.mark.asyncio
    async def test_dangerous_options_rejected(self, service: ConversionService) -> None:
        request = ConversionRequest(url=VIDEO_URL, options=api_options("--quiet; rm -rf /"))

        with pytest.raises(InvalidOptionsError, match="dangerous"):
            await service.convert_video(request)

    @pytest.mark.asyncio
    async def test_prohibited_flag_rejected(self, service: ConversionService) -> None:
        request = ConversionRequest(url=VIDEO_URL, options=api_options("-f best"))

        with pytest.raises(InvalidOptionsError, match="prohibited flag: -f"):
            await service.convert_video(request)

    @pytest.mark.asyncio
    async def test_unknown_video(self, service: ConversionService) -> None:
        request = ConversionRequest(url="https://youtu.be/zzzzzzzzzzz", options=api_options())

        with pytest.raises(VideoNotFoundError):
            await service.convert_video(request)


class TestPrepareOptions:
    """Test script template preparation"""

    def test_builds_template_from_options(self, service: ConversionService) -> None:
        options = service.prepare_options(api_options("  --no-warnings  "))

        assert options.script_options == "--no-warnings"
        assert options.script_template == "yt-dlp {VIDEO_URL} --no-warnings -o -"

    def test_empty_options(self, service: ConversionService) -> None:
        options = service.prepare_options(api_options(""))

        assert options.script_template == "yt-dlp {VIDEO_URL}  -o -"


class TestConvertPlaylist:
    """Test playlist conversion"""

    @pytest.mark.asyncio
    async def test_partial_failures_reported(self, service: ConversionService) -> None:
        result = await service.convert_playlist(ConversionRequest(url=PLAYLIST_URL, options=api_options()))

        assert result.playlist_id == "PL123"
        assert [v.metadata.video_id for v in result.videos] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert result.failed_video_ids == ["private0000"]

    @pytest.mark.asyncio
    async def test_duplicate_filenames_suffixed(self, service: ConversionService) -> None:
        result = await service.convert_playlist(ConversionRequest(url=PLAYLIST_URL, options=api_options()))

        assert [v.filename for v in result.videos] == ["same-title.yml", "same-title-2.yml"]

    @pytest.mark.asyncio
    async def test_sequential_uses_playlist_index(self, service: ConversionService) -> None:
        request = ConversionRequest(
            url=PLAYLIST_URL, options=api_options(), filename_format="sequential-prefix"
        )

        result = await service.convert_playlist(request)

        assert [v.filename for v in result.videos] == ["001-same-title.yml", "003-same-title.yml"]

    @pytest.mark.asyncio
    async def test_passes_playlist_limit(self, service: ConversionService) -> None:
        await service.convert_playlist(ConversionRequest(url=PLAYLIST_URL, options=api_options()))

        assert service.provider.requested_limits == [50]

    @pytest.mark.asyncio
    async def test_video_url_rejected(self, service: ConversionService) -> None:
        with pytest.raises(InvalidURLError, match="Use /api/convert for single videos"):
            await service.convert_playlist(ConversionRequest(url=VIDEO_URL, options=api_options()))

    @pytest.mark.asyncio
    async def test_missing_playlist(self, service: ConversionService) -> None:
        request = ConversionRequest(
            url="https://www.youtube.com/playlist?list=PLnone", options=api_options()
        )

        with pytest.raises(PlaylistNotFoundError):
            await service.convert_playlist(request)


class TestDeduplicateFilename:
    """Test filename collision handling"""

    def test_suffixes_in_order(self) -> None:
        seen: dict = {}

        names = [deduplicate_filename("a.yml", seen) for _ in range(3)]

        assert names == ["a.yml", "a-2.yml", "a-3.yml"]

    def test_avoids_existing_suffixed_name(self) -> None:
        seen: dict = {}
        deduplicate_filename("a-2.yml", seen)
        deduplicate_filename("a.yml", seen)

        assert deduplicate_filename("a.yml", seen) == "a-3.yml"


class TestPlaylistArchive:
    """Test ZIP packaging"""

    @pytest.mark.asyncio
    async def test_archive_entries(self, service: ConversionService) -> None:
        result = await service.convert_playlist(ConversionRequest(url=PLAYLIST_URL, options=api_options()))

        data = build_playlist_archive(result.videos)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == ["same-title.yml", "same-title-2.yml"]
            info = archive.getinfo("same-title.yml")
            assert info.compress_type == zipfile.ZIP_DEFLATED
            assert archive.read("same-title.yml").decode("utf-8") == result.videos[0].yaml

    def test_empty_archive(self) -> None:
        with zipfile.ZipFile(io.BytesIO(build_playlist_archive([]))) as archive:
            assert archive.namelist() == []
