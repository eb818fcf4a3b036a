"""Request and response schemas for API endpoints.

This module provides Pydantic models for API request validation
and response serialization with OpenAPI examples. JSON field names are
camelCase on the wire.
"""

from dataclasses import asdict
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from yt_ersatztv.core.config import GenerationConfig
from yt_ersatztv.core.validation import validate_duration, validate_preset_duration
from yt_ersatztv.models.video import VideoMetadata
from yt_ersatztv.remote_stream.document import GenerationOptions, PlotFormat
from yt_ersatztv.remote_stream.duration import (
    CUSTOM_LIVESTREAM_DURATION,
    ApiDuration,
    CustomDuration,
    DurationPolicy,
    NoDuration,
    PaddedApiDuration,
)
from yt_ersatztv.remote_stream.filename import FilenameFormat
from yt_ersatztv.remote_stream.thumbnail import ThumbnailResolution
from yt_ersatztv.services.conversion import ConvertedVideo, PlaylistConversion

DurationMode = Literal["none", "custom", "api", "api-padded"]


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConvertRequest(CamelModel):
    """Body of the conversion endpoints."""

    url: str = Field(
        ...,
        description="YouTube video or playlist URL",
        examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"],
    )
    duration_mode: DurationMode = Field(..., examples=["api-padded"])
    custom_duration: Optional[str] = Field(None, examples=["01:30:00"])
    padding_interval: Optional[Literal[5, 10, 15, 30]] = Field(
        None, description="Minutes to round API durations up to", examples=[15]
    )
    script_options: Optional[str] = Field(
        None,
        description="Extra yt-dlp options (defaults to the configured options)",
        examples=["--hls-use-mpegts"],
    )
    livestream_duration: str = Field(
        "00:00:00",
        description='Preset duration for live content, or "custom"',
        examples=["01:00:00", "custom"],
    )
    custom_livestream_duration: Optional[str] = Field(None, examples=["03:00:00"])
    include_title: bool = False
    include_plot: bool = False
    plot_format: PlotFormat = "string"
    include_year: bool = False
    include_content_rating: bool = False
    content_rating: str = Field("", examples=["TV-PG"])
    filename_format: FilenameFormat = "compact"
    thumbnail_resolution: ThumbnailResolution = "highest"

    @model_validator(mode="after")
    def check_duration_fields(self) -> "ConvertRequest":
        if self.duration_mode == "custom":
            if not self.custom_duration:
                raise ValueError("customDuration is required when durationMode is custom")
            result = validate_duration(self.custom_duration)
            if not result.is_valid:
                raise ValueError(f"customDuration: {result.error_message}")

        if self.duration_mode == "api-padded" and self.padding_interval is None:
            raise ValueError("paddingInterval is required when durationMode is api-padded")

        if self.livestream_duration == CUSTOM_LIVESTREAM_DURATION:
            if not self.custom_livestream_duration:
                raise ValueError(
                    "customLivestreamDuration is required when livestreamDuration is custom"
                )
            result = validate_duration(self.custom_livestream_duration)
            if not result.is_valid:
                raise ValueError(f"customLivestreamDuration: {result.error_message}")
        else:
            result = validate_preset_duration(self.livestream_duration)
            if not result.is_valid:
                raise ValueError(f"livestreamDuration: {result.error_message}")

        return self

    def duration_policy(self) -> DurationPolicy:
        if self.duration_mode == "custom":
            return CustomDuration(value=(self.custom_duration or "").strip())
        if self.duration_mode == "api":
            return ApiDuration()
        if self.duration_mode == "api-padded":
            return PaddedApiDuration(interval=self.padding_interval or 15)
        return NoDuration()

    def to_options(self, generation: Optional[GenerationConfig] = None) -> GenerationOptions:
        """Map the request onto document generation options."""
        generation = generation or GenerationConfig()
        script_options = (
            self.script_options
            if self.script_options is not None
            else generation.default_script_options
        )
        return GenerationOptions(
            duration=self.duration_policy(),
            livestream_duration=self.livestream_duration.strip(),
            custom_livestream_duration=(self.custom_livestream_duration or "").strip(),
            script_options=script_options,
            include_title=self.include_title,
            include_plot=self.include_plot,
            plot_format=self.plot_format,
            include_year=self.include_year,
            include_content_rating=self.include_content_rating,
            content_rating=self.content_rating,
            always_include_live_duration=generation.always_include_live_duration,
        )


class ThumbnailResponse(CamelModel):
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class ThumbnailsResponse(CamelModel):
    default: Optional[ThumbnailResponse] = None
    medium: Optional[ThumbnailResponse] = None
    high: Optional[ThumbnailResponse] = None
    standard: Optional[ThumbnailResponse] = None
    maxres: Optional[ThumbnailResponse] = None


class VideoMetadataResponse(CamelModel):
    """Video metadata used to build a document."""

    title: str = Field(..., examples=["Rick Astley - Never Gonna Give You Up"])
    description: str = ""
    duration: str = Field(..., description="HH:MM:SS", examples=["00:03:33"])
    is_live: bool = Field(..., examples=[False])
    video_url: str = Field(..., examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"])
    published_at: Optional[str] = Field(None, examples=["2009-10-25T06:57:33Z"])
    video_id: Optional[str] = Field(None, examples=["dQw4w9WgXcQ"])
    thumbnails: Optional[ThumbnailsResponse] = None

    @classmethod
    def from_metadata(cls, metadata: VideoMetadata) -> "VideoMetadataResponse":
        return cls.model_validate(asdict(metadata))


class ConvertResponse(CamelModel):
    """A generated remote stream document."""

    yaml: str = Field(
        ...,
        examples=['script: "yt-dlp https://www.youtube.com/watch?v=dQw4w9WgXcQ  -o -"\nis_live: false'],
    )
    filename: str = Field(..., examples=["rick-astley-never-gonna-give-you-up.yml"])
    metadata: VideoMetadataResponse
    thumbnail_url: Optional[str] = Field(
        None, examples=["https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"]
    )

    @classmethod
    def from_converted(cls, converted: ConvertedVideo) -> "ConvertResponse":
        return cls(
            yaml=converted.yaml,
            filename=converted.filename,
            metadata=VideoMetadataResponse.from_metadata(converted.metadata),
            thumbnail_url=converted.thumbnail_url,
        )


class ConvertPlaylistResponse(CamelModel):
    """Generated documents for a playlist, in playlist order."""

    playlist_id: str = Field(..., examples=["PLrAXtmErZgOeiKm4sgNOknGvNjby9efdf"])
    videos: List[ConvertResponse]
    failed_video_ids: List[str] = Field(
        default_factory=list,
        description="Playlist entries the API did not return (private or deleted)",
    )

    @classmethod
    def from_conversion(cls, conversion: PlaylistConversion) -> "ConvertPlaylistResponse":
        return cls(
            playlist_id=conversion.playlist_id,
            videos=[ConvertResponse.from_converted(video) for video in conversion.videos],
            failed_video_ids=list(conversion.failed_video_ids),
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = Field(..., examples=["ok"])
    timestamp: str = Field(..., examples=["2026-01-15T10:30:00Z"])
    environment: str = Field(..., examples=["production"])
    version: str = Field(..., examples=["1.0.0"])


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: Literal["alive"] = Field(..., examples=["alive"])


class RootResponse(BaseModel):
    """Service index."""

    name: str = Field(..., examples=["YouTube to ErsatzTV API"])
    version: str = Field(..., examples=["1.0.0"])
    endpoints: Dict[str, str]


class ErrorDetail(BaseModel):
    """Structured error response.

    All API errors follow this format with machine-readable error codes
    and optional suggestions for resolution.
    """

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["INVALID_URL", "VIDEO_NOT_FOUND", "RATE_LIMIT_EXCEEDED"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["URL must be from YouTube"],
    )
    details: Optional[str] = Field(
        None,
        description="Additional error context",
        examples=["durationMode: Input should be 'none', 'custom', 'api' or 'api-padded'"],
    )
    timestamp: str = Field(..., examples=["2026-01-15T10:30:00Z"])
    request_id: Optional[str] = Field(
        None,
        description="Request ID for tracing",
        examples=["req_550e8400e29b"],
    )
    suggestion: Optional[str] = Field(
        None,
        description="Suggested action to resolve the error",
        examples=["Wait for the Retry-After period before making more requests"],
    )
