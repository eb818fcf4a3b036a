"""Conversion API endpoints.

POST bodies share the ConvertRequest schema; the URL decides whether a
single video or a whole playlist is converted.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from yt_ersatztv.api.schemas import (
    ConvertPlaylistResponse,
    ConvertRequest,
    ConvertResponse,
    ErrorDetail,
)
from yt_ersatztv.core.config import GenerationConfig
from yt_ersatztv.services.archive import (
    ARCHIVE_FILENAME,
    ARCHIVE_MEDIA_TYPE,
    build_playlist_archive,
)
from yt_ersatztv.services.conversion import ConversionRequest, ConversionService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/convert", tags=["convert"])

ERROR_RESPONSES: dict = {
    400: {"model": ErrorDetail, "description": "Invalid URL, options or request body"},
    404: {"model": ErrorDetail, "description": "Video or playlist not found"},
    429: {"model": ErrorDetail, "description": "Rate limit exceeded"},
    502: {"model": ErrorDetail, "description": "YouTube Data API error"},
    503: {"model": ErrorDetail, "description": "Service not configured"},
}


# Dependency placeholders, wired in create_app
async def get_conversion_service() -> ConversionService:
    """Get conversion service instance."""
    raise NotImplementedError("Conversion service dependency not configured")


async def get_generation_config() -> GenerationConfig:
    """Get generation defaults."""
    raise NotImplementedError("Generation config dependency not configured")


def _to_conversion_request(body: ConvertRequest, generation: GenerationConfig) -> ConversionRequest:
    return ConversionRequest(
        url=body.url,
        options=body.to_options(generation),
        filename_format=body.filename_format,
        thumbnail_resolution=body.thumbnail_resolution,
    )


@router.post(
    "",
    response_model=ConvertResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def convert_video(
    body: ConvertRequest,
    service: ConversionService = Depends(get_conversion_service),  # noqa: B008
    generation: GenerationConfig = Depends(get_generation_config),  # noqa: B008
) -> Any:
    """
    Convert a YouTube video URL into an ErsatzTV remote stream document.

    Returns the YAML text, a suggested filename, the metadata used and
    the selected thumbnail URL.
    """
    logger.info("convert_video_requested", duration_mode=body.duration_mode)

    converted = await service.convert_video(_to_conversion_request(body, generation))
    return ConvertResponse.from_converted(converted)


@router.post(
    "/playlist",
    response_model=ConvertPlaylistResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def convert_playlist(
    body: ConvertRequest,
    service: ConversionService = Depends(get_conversion_service),  # noqa: B008
    generation: GenerationConfig = Depends(get_generation_config),  # noqa: B008
) -> Any:
    """
    Convert every video of a YouTube playlist.

    Videos that are private or deleted are listed in failedVideoIds.
    """
    logger.info("convert_playlist_requested", duration_mode=body.duration_mode)

    conversion = await service.convert_playlist(_to_conversion_request(body, generation))
    return ConvertPlaylistResponse.from_conversion(conversion)


@router.post(
    "/playlist/archive",
    response_class=Response,
    responses={
        200: {"content": {ARCHIVE_MEDIA_TYPE: {}}, "description": "ZIP of YAML documents"},
        **ERROR_RESPONSES,
    },
)
async def convert_playlist_archive(
    body: ConvertRequest,
    service: ConversionService = Depends(get_conversion_service),  # noqa: B008
    generation: GenerationConfig = Depends(get_generation_config),  # noqa: B008
) -> Response:
    """Convert a playlist and download all documents as one ZIP archive."""
    logger.info("convert_playlist_archive_requested", duration_mode=body.duration_mode)

    conversion = await service.convert_playlist(_to_conversion_request(body, generation))
    return Response(
        content=build_playlist_archive(conversion.videos),
        media_type=ARCHIVE_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{ARCHIVE_FILENAME}"'},
    )
